from __future__ import annotations

import pytest

from managed_objects.errors import DuplicateKeyError
from managed_objects.models import Contribution
from managed_objects.services.duplicates import check_duplicates, find_duplicates


def test_find_duplicates_lists_each_repeated_path_once() -> None:
    assert find_duplicates(["b", "a", "b", "c", "a", "b"]) == ["a", "b"]


def test_no_duplicates_passes() -> None:
    check_duplicates(
        [
            Contribution("asset:h1", ["index.html", "js/app.js"]),
            Contribution("object:robots.txt", ["robots.txt"]),
        ]
    )


def test_duplicate_across_archive_and_inline_object() -> None:
    with pytest.raises(DuplicateKeyError) as excinfo:
        check_duplicates(
            [
                Contribution("asset:h1", ["a.txt", "b.txt"]),
                Contribution("object:a.txt", ["a.txt"]),
            ]
        )

    assert str(excinfo.value) == 'Duplicate object keys: ["a.txt"]'
    assert excinfo.value.paths == ["a.txt"]
    assert excinfo.value.contributors == {"a.txt": ["asset:h1", "object:a.txt"]}


def test_every_colliding_path_is_named() -> None:
    with pytest.raises(DuplicateKeyError) as excinfo:
        check_duplicates(
            [
                Contribution("asset:h1", ["x.css", "index.html"]),
                Contribution("asset:h2", ["index.html", "x.css"]),
            ]
        )

    assert excinfo.value.paths == ["index.html", "x.css"]
