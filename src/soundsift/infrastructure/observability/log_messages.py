"""Structured log message templates for consistent, human-readable logging.

Hey future me - detection passes can run for minutes over big libraries, so the
start/finish lines have to be readable at a glance:

    🔍 Duplicate Detection Started
    ├─ Records: 12840
    ├─ Comparable: 12791
    ├─ Preset: Balanced
    └─ Workers: 4

The templates follow these principles:
1. **Icon First** - Visual marker for quick scanning (✅ = success, ⏹️ = cancelled)
2. **Action/Entity** - What happened (detection, plan, preview)
3. **Context** - Counts, ids, timings
4. **Hints** - Only where the user can actually do something about it

Usage:
    from soundsift.infrastructure.observability.log_messages import LogMessages

    logger.info(LogMessages.detection_completed(groups=3, records_in_groups=7,
                comparisons=4950, excluded=0, elapsed_ms=812))
"""

from dataclasses import dataclass, field


@dataclass
class LogTemplate:
    """A log message with an icon, a title, tree-formatted fields and an optional hint."""

    icon: str
    title: str
    fields: dict[str, str] = field(default_factory=dict)
    hint: str | None = None

    def format(self) -> str:
        """Render the multi-line log message."""
        lines = [f"{self.icon} {self.title}"]

        field_items = list(self.fields.items())
        for i, (key, value) in enumerate(field_items):
            # Last line uses └─ instead of ├─
            prefix = "└─" if i == len(field_items) - 1 and not self.hint else "├─"
            lines.append(f"{prefix} {key}: {value}")

        if self.hint:
            lines.append(f"└─ 💡 {self.hint}")

        return "\n".join(lines)


class LogMessages:
    """Collection of standardized log message templates.

    Template categories:
    - Detection lifecycle (started / completed / cancelled)
    - Resolution planning (plan built / auto-resolution preview)
    """

    # === Detection Lifecycle ===

    @staticmethod
    def detection_started(records: int, comparable: int, preset: str, workers: int) -> str:
        """Format a detection start message.

        Args:
            records: Records handed in by the host
            comparable: Records that have at least one compared text field
            preset: Config name
            workers: Scoring threads
        """
        return LogTemplate(
            icon="🔍",
            title="Duplicate Detection Started",
            fields={
                "Records": str(records),
                "Comparable": str(comparable),
                "Preset": preset,
                "Workers": str(workers),
            },
        ).format()

    @staticmethod
    def detection_completed(
        groups: int,
        records_in_groups: int,
        comparisons: int,
        excluded: int,
        elapsed_ms: int,
    ) -> str:
        """Format a detection completion message."""
        hint = None
        if excluded:
            hint = f"{excluded} records have no title/artist/album and were not compared"
        return LogTemplate(
            icon="✅",
            title="Duplicate Detection Completed",
            fields={
                "Groups": str(groups),
                "Records in groups": str(records_in_groups),
                "Comparisons": str(comparisons),
                "Duration": f"{elapsed_ms}ms",
            },
            hint=hint,
        ).format()

    @staticmethod
    def detection_cancelled(completed: int, total: int) -> str:
        """Format a detection cancellation message."""
        percent = (completed / total * 100) if total else 0.0
        return LogTemplate(
            icon="⏹️",
            title="Duplicate Detection Cancelled",
            fields={
                "Comparisons": f"{completed}/{total} ({percent:.1f}%)",
                "Result": "discarded (no partial groups)",
            },
        ).format()

    # === Resolution Planning ===

    @staticmethod
    def plan_built(group_id: int, keep: int, delete: int, reason: str) -> str:
        """Format a resolution plan message."""
        return LogTemplate(
            icon="📋",
            title=f"Resolution Plan for Group {group_id}",
            fields={"Keep": str(keep), "Delete": str(delete), "Reason": reason},
        ).format()

    @staticmethod
    def auto_resolution_preview(groups: int, delete: int, keep: int, review: int) -> str:
        """Format an auto-resolution preview message."""
        hint = f"{review} groups have no clear winner - review them manually" if review else None
        return LogTemplate(
            icon="🧹",
            title="Auto-Resolution Preview",
            fields={"Groups": str(groups), "Delete": str(delete), "Keep": str(keep)},
            hint=hint,
        ).format()


__all__ = ["LogMessages", "LogTemplate"]
