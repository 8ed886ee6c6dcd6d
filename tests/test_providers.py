import asyncio

import httpx
import pytest

from core.errors import ProviderError
from providers import (
    ChuckNorrisProvider,
    DadJokesProvider,
    JokeApiProvider,
    JokesOneProvider,
    OfficialJokeProvider,
    Sv443JokeProvider,
    build_providers,
)
from providers.types import JokeKind


def _call(provider_cls, handler, method="get_random_joke", *args, **provider_kwargs):
    requests = []

    def recording_handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(recording_handler)) as client:
            provider = provider_cls(client, **provider_kwargs)
            return await getattr(provider, method)(*args)

    return asyncio.run(go()), requests


def _json(payload, status=200):
    return lambda request: httpx.Response(status, json=payload)


def _connect_error(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


JOKEAPI_SINGLE = {
    "error": False,
    "category": "Programming",
    "type": "single",
    "joke": "There are only 10 kinds of people.",
    "flags": {"nsfw": False},
    "id": 12,
    "safe": True,
    "lang": "en",
}
JOKEAPI_TWOPART = {
    "error": False,
    "category": "Pun",
    "type": "twopart",
    "setup": "What do you call a fake noodle?",
    "delivery": "An impasta.",
    "id": 205,
    "safe": False,
    "lang": "en",
}


def assert_single(joke):
    assert joke.kind is JokeKind.SINGLE
    assert joke.content.text
    assert joke.content.setup is None
    assert joke.content.punchline is None


def assert_twopart(joke):
    assert joke.kind is JokeKind.TWOPART
    assert joke.content.text is None
    assert joke.content.setup
    assert joke.content.punchline


# ---------------------------------------------------------------------------
# jokeapi.dev / sv443


def test_jokeapi_single_payload():
    joke, requests = _call(JokeApiProvider, _json(JOKEAPI_SINGLE))

    assert_single(joke)
    assert joke.source_id == "12"
    assert joke.category == "programming"
    assert joke.safe is True
    assert joke.lang == "en"
    assert requests[0].url.path == "/joke/Any"
    assert "safe-mode" in str(requests[0].url)


def test_jokeapi_twopart_payload():
    joke, _ = _call(JokeApiProvider, _json(JOKEAPI_TWOPART))

    assert_twopart(joke)
    assert joke.content.punchline == "An impasta."
    assert joke.safe is False


def test_jokeapi_error_payload_is_provider_error():
    with pytest.raises(ProviderError):
        _call(JokeApiProvider, _json({"error": True, "message": "No matching joke found"}))


def test_jokeapi_known_category_is_capitalized():
    _, requests = _call(JokeApiProvider, _json(JOKEAPI_SINGLE), "get_joke_by_category", "PROGRAMMING")
    assert requests[0].url.path == "/joke/Programming"


def test_jokeapi_unknown_category_uses_any():
    joke, requests = _call(JokeApiProvider, _json(JOKEAPI_SINGLE), "get_joke_by_category", "astronomy")
    assert requests[0].url.path == "/joke/Any"
    assert_single(joke)


def test_sv443_uses_own_host_and_type_filter():
    joke, requests = _call(Sv443JokeProvider, _json(JOKEAPI_TWOPART))

    assert_twopart(joke)
    assert requests[0].url.host == "sv443.net"
    assert requests[0].url.path == "/jokeapi/v2/joke/Any"
    assert "type=single" in str(requests[0].url)


def test_sv443_does_not_support_any_category():
    _, requests = _call(Sv443JokeProvider, _json(JOKEAPI_SINGLE), "get_joke_by_category", "spooky")
    assert requests[0].url.path == "/jokeapi/v2/joke/Spooky"
    assert "any" not in Sv443JokeProvider.categories


# ---------------------------------------------------------------------------
# icanhazdadjoke


def test_dadjokes_single_payload_and_accept_header():
    payload = {"id": "R7UfaahVfFd", "joke": "My dog used to chase people on a bike.", "status": 200}
    joke, requests = _call(DadJokesProvider, _json(payload))

    assert_single(joke)
    assert joke.source_id == "R7UfaahVfFd"
    assert joke.category == "dad jokes"
    assert requests[0].headers["accept"] == "application/json"


def test_dadjokes_falls_back_on_server_error():
    joke, _ = _call(DadJokesProvider, _json({"message": "oops"}, status=503))
    assert joke == DadJokesProvider.fallback_joke
    assert_single(joke)


def test_dadjokes_category_is_ignored():
    payload = {"id": "x1", "joke": "Dad joke.", "status": 200}
    joke, requests = _call(DadJokesProvider, _json(payload), "get_joke_by_category", "programming")
    assert joke.source_id == "x1"
    assert len(requests) == 1


# ---------------------------------------------------------------------------
# Chuck Norris


def test_chucknorris_random_without_categories_is_uncategorized():
    payload = {"id": "abc", "value": "Chuck Norris counted to infinity. Twice.", "categories": []}
    joke, _ = _call(ChuckNorrisProvider, _json(payload))

    assert_single(joke)
    assert joke.category == "uncategorized"


def test_chucknorris_known_category_is_forwarded():
    payload = {"id": "dev1", "value": "Chuck Norris writes code that optimizes itself.", "categories": ["DEV"]}
    joke, requests = _call(ChuckNorrisProvider, _json(payload), "get_joke_by_category", "Dev")

    assert requests[0].url.params["category"] == "dev"
    assert joke.category == "dev"


def test_chucknorris_category_defaults_to_requested_when_missing():
    payload = {"id": "f1", "value": "Chuck Norris can cook a salad."}
    joke, _ = _call(ChuckNorrisProvider, _json(payload), "get_joke_by_category", "food")
    assert joke.category == "food"


def test_chucknorris_unknown_category_fetches_random():
    payload = {"id": "r1", "value": "Random fact.", "categories": ["movie"]}
    joke, requests = _call(ChuckNorrisProvider, _json(payload), "get_joke_by_category", "knitting")

    assert "category" not in requests[0].url.params
    assert joke.category == "movie"


def test_chucknorris_connection_error_is_provider_error():
    with pytest.raises(ProviderError) as exc_info:
        _call(ChuckNorrisProvider, _connect_error)
    assert isinstance(exc_info.value.source, httpx.ConnectError)


# ---------------------------------------------------------------------------
# Official Joke API


def test_official_random_is_twopart():
    payload = {"type": "general", "setup": "Why did the scarecrow win?", "punchline": "Outstanding in his field.", "id": 7}
    joke, requests = _call(OfficialJokeProvider, _json(payload))

    assert_twopart(joke)
    assert joke.source_id == "7"
    assert joke.category == "general"
    assert requests[0].url.path == "/random_joke"


def test_official_category_endpoint_returns_array():
    payload = [{"type": "knock-knock", "setup": "Knock knock.", "punchline": "Boo who?", "id": 9}]
    joke, requests = _call(OfficialJokeProvider, _json(payload), "get_joke_by_category", "Knock-Knock")

    assert requests[0].url.path == "/jokes/knock-knock/random"
    assert joke.category == "knock-knock"
    assert_twopart(joke)


def test_official_unknown_category_uses_general():
    payload = [{"type": "general", "setup": "S", "punchline": "P", "id": 1}]
    _, requests = _call(OfficialJokeProvider, _json(payload), "get_joke_by_category", "sports")
    assert requests[0].url.path == "/jokes/general/random"


def test_official_empty_array_is_provider_error():
    with pytest.raises(ProviderError):
        _call(OfficialJokeProvider, _json([]), "get_joke_by_category", "dad")


def test_official_missing_punchline_is_provider_error():
    with pytest.raises(ProviderError):
        _call(OfficialJokeProvider, _json({"type": "general", "setup": "Only a setup", "id": 3}))


# ---------------------------------------------------------------------------
# Jokes One


JOKES_ONE_PAYLOAD = {
    "success": {"total": 1},
    "contents": {
        "jokes": [
            {
                "category": "jod",
                "language": "en",
                "joke": {"id": "Xr3d", "title": "Atoms", "text": "Jokes One text.", "lang": "en"},
            }
        ]
    },
}


def test_jokes_one_contents_shape():
    joke, requests = _call(JokesOneProvider, _json(JOKES_ONE_PAYLOAD))

    assert_single(joke)
    assert joke.source_id == "Xr3d"
    assert joke.content.text == "Jokes One text."
    assert joke.category == "general"
    assert requests[0].url.path == "/jod"
    assert "x-jokesone-api-secret" not in requests[0].headers


def test_jokes_one_direct_joke_shape_and_api_key():
    payload = {"joke": [{"id": "d1", "text": "Direct joke.", "category": "Programming"}]}
    joke, requests = _call(JokesOneProvider, _json(payload), api_key="secret")

    assert joke.source_id == "d1"
    assert joke.category == "programming"
    assert requests[0].headers["x-jokesone-api-secret"] == "secret"


@pytest.mark.parametrize(
    "handler",
    [
        _json({"error": {"code": 429, "message": "Too Many Requests"}}, status=429),
        _connect_error,
        _json({"contents": {"jokes": []}}),
    ],
)
def test_jokes_one_falls_back_on_failure(handler):
    joke, _ = _call(JokesOneProvider, handler)

    assert joke == JokesOneProvider.fallback_joke
    assert joke.category == "science"
    assert "atoms" in joke.content.text


# ---------------------------------------------------------------------------
# Contract


SINGLE_CASES = [
    (JokeApiProvider, JOKEAPI_SINGLE),
    (Sv443JokeProvider, JOKEAPI_SINGLE),
    (DadJokesProvider, {"id": "a", "joke": "Single dad joke."}),
    (ChuckNorrisProvider, {"id": "b", "value": "Single fact.", "categories": []}),
    (JokesOneProvider, JOKES_ONE_PAYLOAD),
]
TWOPART_CASES = [
    (JokeApiProvider, JOKEAPI_TWOPART),
    (Sv443JokeProvider, JOKEAPI_TWOPART),
    (OfficialJokeProvider, {"type": "dad", "setup": "S", "punchline": "P", "id": 4}),
]


@pytest.mark.parametrize("provider_cls,payload", SINGLE_CASES)
def test_single_payloads_populate_text_only(provider_cls, payload):
    joke, _ = _call(provider_cls, _json(payload))
    assert_single(joke)


@pytest.mark.parametrize("provider_cls,payload", TWOPART_CASES)
def test_twopart_payloads_populate_setup_and_punchline_only(provider_cls, payload):
    joke, _ = _call(provider_cls, _json(payload))
    assert_twopart(joke)


def test_build_providers_has_six_distinct_providers():
    async def go():
        async with httpx.AsyncClient() as client:
            return build_providers(client, jokes_one_api_key="k")

    providers = asyncio.run(go())

    assert len(providers) == 6
    assert len({p.base_url for p in providers}) == 6
    for provider in providers:
        categories = provider.get_supported_categories()
        assert all(cat == cat.lower() for cat in categories)
        assert provider.info().categories == categories
