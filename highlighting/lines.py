"""Reconstruction of reading-order lines from extracted text runs."""

from typing import Iterable, Iterator, Optional

from highlighting.models import Line, TextRun


def reconstruct_lines(runs: Iterable[TextRun]) -> Iterator[Line]:
    """
    Group text runs into lines.

    Runs are consumed in the order the extractor emitted them. A new line
    starts whenever a run's vertical origin differs from the previous
    run's. The comparison is exact, so runs a fraction of a unit apart
    (superscripts, slightly skewed scans) end up on separate lines, while
    overlapping runs on the same baseline are concatenated as-is.

    Args:
        runs: Text runs of one page

    Yields:
        Line objects in emission order
    """
    buffer: Optional[Line] = None
    baseline: Optional[float] = None

    for run in runs:
        if buffer is not None and run.origin_y != baseline:
            yield buffer
            buffer = None

        if buffer is None:
            buffer = Line()

        buffer.append(run)
        baseline = run.origin_y

    if buffer is not None:
        yield buffer
