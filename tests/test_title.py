"""Tests for council/title.py."""

import pytest

from council.errors import TitleError
from council.gateway import GatewayClient
from council.providers.base import ProviderError
from council.title import clean_title, generate_title
from tests.conftest import MockProvider


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('"Capital of France"', "Capital of France"),
        ("  'Quoted'  \n", "Quoted"),
        ("Plain title", "Plain title"),
    ],
)
def test_clean_title(raw, expected):
    assert clean_title(raw) == expected


def test_clean_title_truncates():
    title = clean_title("x" * 80)
    assert len(title) == 50
    assert title.endswith("...")


async def test_generate_title(sample_prompts_config):
    provider = MockProvider({"m/title": '"Paris Question"'})
    title = await generate_title(GatewayClient(provider), "Capital?", "m/title", sample_prompts_config)
    assert title == "Paris Question"
    _, messages = provider.calls()[0]
    assert messages[-1]["content"] == "TITLE: Capital?"


async def test_generate_title_failure(sample_prompts_config):
    provider = MockProvider({"m/title": ProviderError("mock", "down")})
    with pytest.raises(TitleError):
        await generate_title(GatewayClient(provider), "Capital?", "m/title", sample_prompts_config)


async def test_generate_title_only_quotes(sample_prompts_config):
    provider = MockProvider({"m/title": '""'})
    with pytest.raises(TitleError, match="empty"):
        await generate_title(GatewayClient(provider), "Capital?", "m/title", sample_prompts_config)
