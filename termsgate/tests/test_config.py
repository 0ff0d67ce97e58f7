import pytest

from termsgate.app.config import (
    LATEST_POLICIES_URL_ENV,
    POLICIES_BASE_URL_ENV,
    GateConfig,
    load_config,
)
from termsgate.app.errors import ConfigurationError


def test_load_config_reads_both_urls():
    config = load_config(
        {
            LATEST_POLICIES_URL_ENV: "https://mysite.com/policy/latest.json",
            POLICIES_BASE_URL_ENV: "https://mysite.com/policy/%1$s/%1$s.%2$s.html",
        }
    )
    assert config == GateConfig(
        latest_policies_url="https://mysite.com/policy/latest.json",
        policies_base_url="https://mysite.com/policy/%1$s/%1$s.%2$s.html",
    )


@pytest.mark.parametrize(
    "environ",
    [
        {},
        {LATEST_POLICIES_URL_ENV: "https://mysite.com/latest.json"},
        {POLICIES_BASE_URL_ENV: "https://mysite.com/%1$s"},
        {LATEST_POLICIES_URL_ENV: "  ", POLICIES_BASE_URL_ENV: "https://mysite.com/%1$s"},
    ],
)
def test_missing_configuration_is_fatal(environ):
    with pytest.raises(ConfigurationError):
        load_config(environ)


def test_config_is_immutable():
    config = GateConfig(latest_policies_url="a", policies_base_url="b")
    with pytest.raises(AttributeError):
        config.latest_policies_url = "c"
