"""Ordered queue of findings awaiting a decision."""

from typing import Iterable, Iterator

from patchnote.models import Finding, FindingStatus


class FindingQueue:
  """Findings in presentation order: file order, then catalog order."""

  def __init__(self, findings: Iterable[Finding] = ()):
    self._items: list[Finding] = list(findings)

  def __len__(self) -> int:
    return len(self._items)

  def __iter__(self) -> Iterator[Finding]:
    return iter(self._items)

  def __getitem__(self, index: int) -> Finding:
    return self._items[index]

  def extend(self, findings: Iterable[Finding]) -> None:
    self._items.extend(findings)

  @property
  def pending(self) -> list[Finding]:
    """Findings that have not been presented yet."""
    return [f for f in self._items if f.status is FindingStatus.PROPOSED]
