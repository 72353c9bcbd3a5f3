import pytest
from pydantic import ValidationError

from anilist_rest.api.media import coerce_int
from anilist_rest.schemas import MediaQueryParams


def _search(q: str, page: int = 1, per_page: int = 10, kind: str = "anime") -> MediaQueryParams:
    return MediaQueryParams(kind=kind, operation="search", search=q, page=page, per_page=per_page)


def test_cache_key_shapes():
    assert _search("naruto", kind="manga").cache_key() == "manga:search:naruto:1:10"
    assert MediaQueryParams(kind="anime", operation="by_id", id=21).cache_key() == "anime:id:21"
    assert (
        MediaQueryParams(kind="manga", operation="top_manhwa", page=3, per_page=5).cache_key()
        == "manga:top_manhwa:3:5"
    )


def test_identical_params_share_a_key():
    assert _search("naruto", 2, 20).cache_key() == _search("naruto", 2, 20).cache_key()


@pytest.mark.parametrize(
    "a, b",
    [
        (_search("naruto", 1, 20), _search("naruto", 2, 20)),
        (_search("naruto", 1, 10), _search("naruto", 1, 20)),
        (_search("naruto", 1, 10), _search("bleach", 1, 10)),
        (_search("naruto", 1, 10, "anime"), _search("naruto", 1, 10, "manga")),
        # a search ending in ":<int>" must not alias another page
        (_search("a:1", 1, 10), _search("a", 11, 10)),
        (_search("x:1", 2, 3), _search("x", 1, 2)),
        (
            MediaQueryParams(kind="manga", operation="by_id", id=1),
            MediaQueryParams(kind="anime", operation="by_id", id=1),
        ),
        (
            MediaQueryParams(kind="manga", operation="top100"),
            MediaQueryParams(kind="manga", operation="trending"),
        ),
    ],
)
def test_distinct_params_never_collide(a, b):
    assert a.cache_key() != b.cache_key()


def test_variables():
    assert _search("naruto", 2, 20).variables() == {"search": "naruto", "page": 2, "perPage": 20}
    assert MediaQueryParams(kind="manga", operation="top100").variables() == {"page": 1, "perPage": 10}
    assert MediaQueryParams(kind="manga", operation="by_id", id=7).variables() == {"id": 7}


def test_params_are_immutable_and_validated():
    params = MediaQueryParams(kind="manga", operation="top100")
    with pytest.raises(ValidationError):
        params.page = 2
    with pytest.raises(ValidationError):
        MediaQueryParams(kind="manga", operation="top100", page=0)
    with pytest.raises(ValidationError):
        MediaQueryParams(kind="comic", operation="top100")


@pytest.mark.parametrize(
    "raw, expected",
    [(None, 1), ("", 1), ("abc", 1), ("3", 3), (" 3", 3), ("3abc", 3), ("2.5", 2), ("-4", -4), ("0", 0)],
)
def test_coerce_int(raw, expected):
    assert coerce_int(raw, 1) == expected
