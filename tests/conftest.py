import json

import pytest

from payloads import NUMERIC_PAYLOAD, STRING_PAYLOAD


@pytest.fixture
def numeric_body():
    return json.dumps(NUMERIC_PAYLOAD).encode("utf-8")


@pytest.fixture
def string_body():
    return json.dumps(STRING_PAYLOAD).encode("utf-8")
