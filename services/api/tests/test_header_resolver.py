import pytest
from labshelf.ingestion.errors import MalformedHeader
from labshelf.ingestion.headers import CURRENT_VARIANT, VARIANTS, resolve_header

LEGACY = "ISBNコード,雑誌コード,タイトル,著者,出版社,年,タイムスタンプ,表紙,場所,状態,メモ"


@pytest.mark.parametrize("variant", VARIANTS, ids=lambda v: v.name)
def test_every_layout_resolves_to_itself(variant):
    column_map = resolve_header(list(variant.labels))
    assert column_map.variant.name == variant.name
    assert column_map.extra_columns == []


def test_current_layout():
    header = "id,ISBNコード,雑誌コード,タイトル,著者,出版社,年,タイムスタンプ,表紙,場所,状態,メモ,タグ"
    column_map = resolve_header(header.split(","))
    assert column_map.variant is CURRENT_VARIANT
    assert column_map.index_of("id") == 0
    assert column_map.index_of("title") == 3
    assert column_map.index_of("tags") == 12


def test_legacy_layout_has_no_id_or_tags():
    column_map = resolve_header(LEGACY.split(","))
    assert column_map.variant.name == "localized-legacy"
    assert not column_map.variant.has_id
    assert not column_map.variant.has_tags
    assert column_map.index_of("id") is None
    assert column_map.index_of("isbn") == 0


def test_generic_layout():
    header = "id,title,author,isbn,year,publisher,tags,location,status,note"
    column_map = resolve_header(header.split(","))
    assert column_map.variant.name == "generic"
    assert column_map.index_of("isbn") == 3


def test_header_match_ignores_width_and_spaces():
    header = ["ｉｄ", " ＩＳＢＮ コード ", "雑誌コード", "ﾀｲﾄﾙ"] + CURRENT_VARIANT.labels[4:]
    assert resolve_header(header).variant is CURRENT_VARIANT


def test_header_match_is_case_sensitive():
    header = "ID,title,author,isbn,year,publisher,tags,location,status,note"
    with pytest.raises(MalformedHeader):
        resolve_header(header.split(","))


def test_columns_after_layout_become_extras():
    header = LEGACY.split(",") + ["購入日", "", " 寄贈者 "]
    column_map = resolve_header(header)
    assert column_map.variant.name == "localized-legacy"
    assert column_map.extra_columns == [("購入日", 11), ("寄贈者", 13)]


def test_renamed_column_is_rejected():
    header = LEGACY.replace("タイトル", "書名").split(",")
    with pytest.raises(MalformedHeader) as exc:
        resolve_header(header)
    assert len(exc.value.accepted) == len(VARIANTS)
    assert "localized-legacy" in str(exc.value)


def test_reordered_columns_are_rejected():
    header = LEGACY.replace("タイトル,著者", "著者,タイトル").split(",")
    with pytest.raises(MalformedHeader):
        resolve_header(header)


def test_truncated_header_is_rejected():
    with pytest.raises(MalformedHeader):
        resolve_header(LEGACY.split(",")[:-1])
