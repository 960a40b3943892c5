"""Plain-text formatting of classification results."""

from typing import Iterable, Optional

from .classifier.models import ClassificationResult


def short_hash(value: Optional[str], keep: int = 10) -> str:
    """Shorten a 0x hash for display."""
    if not value:
        return "-"
    if len(value) <= keep + 6:
        return value
    return f"{value[:keep]}…{value[-4:]}"


class ResultFormatter:
    """Formats results for terminal output and report summaries."""

    CONFIDENCE_LABEL = (
        (0.40, "STRONG"),
        (0.25, "MODERATE"),
        (0.0001, "WEAK"),
    )

    @classmethod
    def confidence_label(cls, confidence: float) -> str:
        for threshold, label in cls.CONFIDENCE_LABEL:
            if confidence >= threshold:
                return label
        return "NONE"

    @classmethod
    def format_result(cls, result: ClassificationResult, tx_hash: Optional[str] = None) -> str:
        """Format a single classification."""
        tx_type = result.type
        lines = [
            f"{tx_type.icon} {tx_type.label}: {result.label}",
            f"Tx: {short_hash(tx_hash)}",
            f"Confidence: {cls.confidence_label(result.confidence)} ({result.confidence:.2f})",
            f"Detector: {result.matched_detector_id or '-'}",
        ]

        if result.reasons:
            lines.append("")
            lines.append("Evidence:")
            for reason in result.reasons:
                lines.append(f"  • {reason}")

        if result.secondary:
            lines.append("")
            lines.append("Also matched:")
            for detector_id, match in result.secondary[:3]:
                lines.append(f"  • {detector_id}: {match.name} ({match.type.value}, {match.confidence:.2f})")
            if len(result.secondary) > 3:
                lines.append(f"  (+{len(result.secondary) - 3} more)")

        for warning in result.warnings:
            lines.append(f"⚠️ {warning}")

        if result.trace is not None:
            lines.append("")
            lines.append("Trace:")
            for entry in result.trace:
                status = "error" if entry.error else ("match" if entry.matched else "no match")
                lines.append(f"  {entry.detector_id:<18} p={entry.priority:<3} {status} {entry.confidence:.2f}")

        return "\n".join(lines)

    @classmethod
    def format_summary(cls, results: Iterable[ClassificationResult]) -> str:
        """One line per type with counts, most frequent first."""
        counts: dict[str, int] = {}
        total = 0
        for result in results:
            total += 1
            counts[result.type.label] = counts.get(result.type.label, 0) + 1
        if not total:
            return "No transactions classified"
        lines = [f"Classified {total} transaction(s):"]
        for label, count in sorted(counts.items(), key=lambda item: (-item[1], item[0])):
            lines.append(f"  {label}: {count}")
        return "\n".join(lines)
