"""
Tests for response builders
"""

import json

import pytest

from geoip_api.api.response_builders import (
    JSON_MEDIA_TYPE,
    build_health_response,
    build_invalid_ip_response,
    build_outcome_response,
)
from geoip_api.schemas.geo import GeolocationRecord
from geoip_api.services.lookup import Failed, Found, NotFound

NAME_GROUPS = ("city", "subdivisions", "country", "registered_country")


def _body(response):
    return json.loads(response.body)


@pytest.mark.parametrize("outcome, status, body", [
    (NotFound(), 404, {"error": "not_found"}),
    (Failed("corrupt"), 500, {"error": "internal_error"}),
])
def test_error_outcomes(outcome, status, body):
    response = build_outcome_response(outcome, include_ip=True)
    assert response.status_code == status
    assert _body(response) == body
    assert response.headers["content-type"] == JSON_MEDIA_TYPE


def test_invalid_ip_response():
    response = build_invalid_ip_response()
    assert response.status_code == 400
    assert _body(response) == {"error": "invalid_ip"}
    assert response.headers["content-type"] == JSON_MEDIA_TYPE


def test_health_response():
    response = build_health_response()
    assert response.status_code == 200
    assert _body(response) == {"status": "healthy"}
    assert response.headers["content-type"] == JSON_MEDIA_TYPE


def test_found_empty_record_keeps_name_groups():
    response = build_outcome_response(Found(GeolocationRecord(ip="192.0.2.1")), include_ip=True)
    body = _body(response)
    assert response.status_code == 200
    for group in NAME_GROUPS:
        assert group in body
    assert body["subdivisions"] == []
    assert body["ip"] == "192.0.2.1"


def test_found_without_ip_field():
    record = GeolocationRecord(ip="192.0.2.1", city={"en": "Springfield"})
    body = _body(build_outcome_response(Found(record), include_ip=False))
    assert "ip" not in body
    assert body["city"] == {"en": "Springfield"}


def test_include_ip_defaults_to_config():
    record = GeolocationRecord(ip="192.0.2.1")
    with pytest.MonkeyPatch.context() as mp:
        mp.setattr("geoip_api.config.INCLUDE_IP", False)
        assert "ip" not in _body(build_outcome_response(Found(record)))


def test_non_ascii_names_are_not_escaped():
    record = GeolocationRecord(city={"en": "Linköping"})
    response = build_outcome_response(Found(record), include_ip=False)
    assert "Linköping".encode("utf-8") in response.body


def test_unknown_outcome_is_rejected():
    with pytest.raises(TypeError):
        build_outcome_response(object())
