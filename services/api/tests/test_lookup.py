import httpx
import pytest
from labshelf.domain.book import Book
from labshelf.services.lookup.google_books_provider import GoogleBooksProvider
from labshelf.services.lookup.openbd_provider import OpenBDProvider
from labshelf.services.lookup.service import (
    InvalidIsbn,
    LookupEmpty,
    LookupFailed,
    fill_from_lookup,
    lookup_isbn,
    lookup_key,
)
from labshelf.services.lookup.types import BibliographicRecord

OPENBD_URL = "https://openbd.test/v1/get"
GOOGLE_URL = "https://books.test/v1/volumes"
ISBN = "9780441013593"

OPENBD_HIT = [
    {
        "summary": {
            "isbn": ISBN,
            "title": "デューン",
            "author": "フランク・ハーバート",
            "publisher": "早川書房",
            "pubdate": "20160115",
            "cover": "",
        }
    }
]
GOOGLE_HIT = {
    "items": [
        {
            "volumeInfo": {
                "title": "Dune",
                "authors": ["Frank Herbert"],
                "publisher": "Ace",
                "publishedDate": "1990-09-01",
                "imageLinks": {"thumbnail": "https://books.test/dune.jpg"},
            }
        }
    ]
}


def _client(openbd, google) -> httpx.AsyncClient:
    """Route each service to a handler: a JSON body, an int status, or an exception."""

    def respond(reply, request):
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, int):
            return httpx.Response(reply, request=request)
        return httpx.Response(200, json=reply, request=request)

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "openbd.test":
            return respond(openbd, request)
        return respond(google, request)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _providers(client):
    return [OpenBDProvider(client, OPENBD_URL), GoogleBooksProvider(client, GOOGLE_URL)]


def test_lookup_key():
    assert lookup_key("978-0-441-01359-3") == ISBN
    assert lookup_key("0441013597") == ISBN
    with pytest.raises(InvalidIsbn):
        lookup_key("12345")


@pytest.mark.asyncio
async def test_first_provider_wins_per_field():
    async with _client(OPENBD_HIT, GOOGLE_HIT) as client:
        rec = await lookup_isbn(ISBN, _providers(client))

    assert rec.isbn == ISBN
    assert rec.title == "デューン"
    assert rec.year == "2016"
    # openBD had no cover, so Google Books fills it
    assert rec.cover == "https://books.test/dune.jpg"
    assert rec.sources == ["openbd", "google_books"]


@pytest.mark.asyncio
async def test_falls_back_when_first_provider_is_empty():
    async with _client([None], GOOGLE_HIT) as client:
        rec = await lookup_isbn("0-441-01359-7", _providers(client))

    assert rec.title == "Dune"
    assert rec.author == "Frank Herbert"
    assert rec.year == "1990"
    assert rec.sources == ["google_books"]


@pytest.mark.asyncio
async def test_one_provider_down_is_tolerated():
    async with _client(500, GOOGLE_HIT) as client:
        rec = await lookup_isbn(ISBN, _providers(client))
    assert rec.title == "Dune"


@pytest.mark.asyncio
async def test_no_data_is_lookup_empty():
    async with _client([None], {"totalItems": 0}) as client:
        with pytest.raises(LookupEmpty):
            await lookup_isbn(ISBN, _providers(client))


@pytest.mark.asyncio
async def test_partial_failure_without_data_is_lookup_empty():
    async with _client(503, {"totalItems": 0}) as client:
        with pytest.raises(LookupEmpty):
            await lookup_isbn(ISBN, _providers(client))


@pytest.mark.asyncio
async def test_all_providers_down_is_lookup_failed():
    boom = httpx.ConnectError("connection refused")
    async with _client(boom, 502) as client:
        with pytest.raises(LookupFailed):
            await lookup_isbn(ISBN, _providers(client))


@pytest.mark.asyncio
async def test_invalid_isbn_never_hits_the_network():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(InvalidIsbn):
            await lookup_isbn("abc", _providers(client))
    assert calls == []


@pytest.mark.asyncio
async def test_google_books_sends_api_key():
    seen = {}

    def handler(request):
        seen.update(request.url.params)
        return httpx.Response(200, json=GOOGLE_HIT)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        await GoogleBooksProvider(client, GOOGLE_URL, api_key="k").fetch(ISBN)
    assert seen == {"q": f"isbn:{ISBN}", "key": "k"}


def test_fill_from_lookup_only_fills_blanks():
    book = Book(id="a", title="Mine", isbn=ISBN, extras={"timestamp": "t"})
    rec = BibliographicRecord(
        isbn=ISBN, title="Dune", author="Frank Herbert", year="1990", cover="c"
    )
    filled = fill_from_lookup(book, rec)
    assert filled.title == "Mine"
    assert filled.author == "Frank Herbert"
    assert filled.year == "1990"
    assert filled.extras == {"timestamp": "t", "cover": "c"}
    assert book.author == ""
