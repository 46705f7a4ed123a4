"""
Contribution model: the paths one source wrote into the final tree
"""
from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Contribution:
    """Relative paths written by one archive asset or inline object.

    Attributes:
        contributor: Human-readable source label (``asset:<hash>`` or
            ``object:<key>``)
        paths: POSIX relative paths written into the final tree
    """

    contributor: str
    paths: List[str] = field(default_factory=list)
