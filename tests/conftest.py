from binja_test_mocks import binja_api  # noqa: F401  # pyright: ignore

import pytest

from st20.config import DecoderConfig
from st20.decoder import ST20Decoder
from st20.decoding.reader import MemoryImage
from st20.rtl.dictionary import SemanticDictionary


@pytest.fixture(scope="session")
def dictionary() -> SemanticDictionary:
    return SemanticDictionary.default()


@pytest.fixture
def make_decoder(dictionary):
    def build(data: bytes, base: int = 0, **config) -> ST20Decoder:
        return ST20Decoder(
            MemoryImage(base, bytes(data)),
            config=DecoderConfig(**config),
            dictionary=dictionary,
        )

    return build
