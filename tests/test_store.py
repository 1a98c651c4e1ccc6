import hashlib
import json
from unittest.mock import MagicMock

import pytest
import redis

from newshippo.errors import StoreError
from newshippo.store import RedisRecordStore

URL = "http://example.com/a"
KEY = "article:" + hashlib.sha256(URL.encode("utf-8")).hexdigest()


@pytest.fixture
def client():
    return MagicMock(spec=redis.Redis)


def test_get_decodes_json_fields(client):
    client.hgetall.return_value = {"url": json.dumps(URL), "concepts": json.dumps(["x", "y"])}

    record = RedisRecordStore(client).get("article", URL)

    client.hgetall.assert_called_once_with(KEY)
    assert record == {"url": URL, "concepts": ["x", "y"]}


def test_get_missing_record_returns_none(client):
    client.hgetall.return_value = {}

    assert RedisRecordStore(client).get("article", URL) is None


def test_put_writes_every_field_in_one_hset(client):
    RedisRecordStore(client).put("article", URL, {"url": URL, "newsSource": "example.com"})

    client.hset.assert_called_once_with(
        KEY, mapping={"url": json.dumps(URL), "newsSource": json.dumps("example.com")}
    )


def test_update_sets_exactly_one_field(client):
    RedisRecordStore(client).update("article", URL, "lang", "en")

    client.hset.assert_called_once_with(KEY, "lang", json.dumps("en"))


def test_delete_is_plain_del(client):
    RedisRecordStore(client).delete("article", URL)

    client.delete.assert_called_once_with(KEY)


@pytest.mark.parametrize("error", [redis.ConnectionError("down"), redis.TimeoutError("slow")])
def test_redis_failures_become_store_errors(client, error):
    client.hgetall.side_effect = error

    with pytest.raises(StoreError):
        RedisRecordStore(client).get("article", URL)


def test_scan_page_returns_cursor_and_records(client):
    client.scan.return_value = (7, ["newsSource:abc"])
    client.hgetall.return_value = {"url": json.dumps("example.com")}

    cursor, items = RedisRecordStore(client).scan_page("newsSource", 0, 10)

    client.scan.assert_called_once_with(cursor=0, match="newsSource:*", count=10)
    assert cursor == 7
    assert items == [{"url": "example.com"}]


def test_scan_skips_keys_deleted_mid_scan(client):
    client.scan_iter.return_value = iter(["newsSource:a", "newsSource:b"])
    client.hgetall.side_effect = [{"url": json.dumps("a.com")}, {}]

    assert RedisRecordStore(client).scan("newsSource") == [{"url": "a.com"}]


def test_scan_reads_each_key_once_when_scan_repeats_it(client):
    client.scan_iter.return_value = iter(["newsSource:a", "newsSource:a"])
    client.hgetall.return_value = {"url": json.dumps("a.com")}

    assert RedisRecordStore(client).scan("newsSource") == [{"url": "a.com"}]
    client.hgetall.assert_called_once_with("newsSource:a")


def test_scan_page_reads_each_key_once(client):
    client.scan.return_value = (7, ["newsSource:a", "newsSource:a"])
    client.hgetall.return_value = {"url": json.dumps("a.com")}

    assert RedisRecordStore(client).scan_page("newsSource", 0, 10) == (7, [{"url": "a.com"}])


def test_health_check_reports_ping_failure(client):
    client.ping.side_effect = redis.ConnectionError("down")

    assert RedisRecordStore(client).health_check() is False
