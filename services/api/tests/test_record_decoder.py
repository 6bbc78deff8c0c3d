from labshelf.domain.book import BookStatus
from labshelf.domain.normalize import IsbnFallback
from labshelf.ingestion.decoder import decode_row, decode_rows
from labshelf.ingestion.headers import CURRENT_VARIANT, resolve_header

CURRENT = resolve_header(list(CURRENT_VARIANT.labels))
LEGACY = resolve_header(
    "ISBNコード,雑誌コード,タイトル,著者,出版社,年,タイムスタンプ,表紙,場所,状態,メモ".split(",")
)
GENERIC = resolve_header(
    "title,author,isbn,year,publisher,tags,location,status,note,shelf mark".split(",")
)


def test_decode_current_row():
    row = [
        "b1",
        "0-441-01359-7",
        "",
        " Dune ",
        "Frank Herbert",
        "Ace",
        "1990",
        "2024-01-01T00:00:00Z",
        "https://example.test/c.jpg",
        "研究室A-3",
        "貸出中",
        "付箋多数",
        "SF; 古典、SF",
    ]
    book = decode_row(row, CURRENT)
    assert book is not None
    assert book.id == "b1"
    assert book.isbn == "9780441013593"
    assert book.title == "Dune"
    assert book.status is BookStatus.checked_out
    assert book.tags == ["SF", "古典"]
    assert book.extras == {
        "timestamp": "2024-01-01T00:00:00Z",
        "cover": "https://example.test/c.jpg",
    }


def test_short_row_is_padded():
    book = decode_row(["", "", "", "Only a title"], CURRENT)
    assert book is not None
    assert book.title == "Only a title"
    assert book.note == ""
    assert book.tags == []
    assert book.status is BookStatus.held


def test_unknown_status_label_means_held():
    row = ["", "", "T", "", "", "", "", "", "", "lost", ""]
    assert decode_row(row, LEGACY).status is BookStatus.held


def test_blank_row_is_skipped():
    assert decode_row(["", " ", "　"], CURRENT) is None
    assert decode_row([], CURRENT) is None


def test_row_without_title_isbn_or_id_is_skipped():
    row = ["", "", "", "", "Author", "Publisher", "2001", "", "", "棚", "所蔵", "memo", ""]
    assert decode_row(row, CURRENT) is None


def test_id_alone_makes_a_record_in_id_layouts():
    book = decode_row(["b9", "", "", ""], CURRENT)
    assert book is not None
    assert book.id == "b9"


def test_isbn_alone_makes_a_record():
    book = decode_row(["9780441013593"], LEGACY)
    assert book is not None
    assert book.isbn == "9780441013593"
    assert book.id == ""


def test_odd_isbn_does_not_validate_a_row():
    assert decode_row(["12345", "", ""], LEGACY) is None


def test_odd_isbn_kept_or_discarded():
    row = ["12345", "", "Title"]
    assert decode_row(row, LEGACY, isbn_fallback=IsbnFallback.KEEP).isbn == "12345"
    assert decode_row(row, LEGACY, isbn_fallback=IsbnFallback.DISCARD).isbn == ""


def test_generic_layout_extras_use_header_label():
    row = ["Dune", "Herbert", "9780441013593", "1965", "Chilton", "sf", "A-1", "checked-out", "", "S-12"]
    book = decode_row(row, GENERIC)
    assert book.status is BookStatus.checked_out
    assert book.extras == {"shelf mark": "S-12"}


def test_decode_rows_counts_blank_and_rejected():
    rows = [
        ["", "", "Kept"],
        ["", "", ""],
        ["", "", "", "Author only"],
        ["9780441013593"],
    ]
    result = decode_rows(rows, LEGACY)
    assert [b.title for b in result.books] == ["Kept", ""]
    assert result.blank == 1
    assert result.rejected == 1
