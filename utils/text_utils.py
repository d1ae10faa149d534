"""
Text helpers for turning raw editor content into layout input
"""

from typing import List


def split_segments(content: str) -> List[str]:
    """
    Split multi-line content into scatter segments

    Args:
        content: Raw content, one segment per line

    Returns:
        Trimmed, non-empty segments in input order
    """
    return [line.strip() for line in content.split("\n") if line.strip()]


def split_title(title: str) -> List[str]:
    """
    Split title text into display lines (Enter = line break)

    Args:
        title: Raw title text

    Returns:
        Title lines (an empty title yields a single empty line)
    """
    return title.split("\n")
