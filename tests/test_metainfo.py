import hashlib
import io

import pytest

from tyr.bencode import BencodeError
from tyr.metainfo import (
    FileInfo,
    Info,
    InfoHash,
    MetaInfo,
    distinct_values,
    load,
    load_from_file,
    overrides_announce,
)


def test_marshal_empty_info():
    assert Info().to_bencode() == b"d4:name0:12:piece lengthi0e6:pieces0:e"


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"de", MetaInfo()),
        (b"d4:infodee", MetaInfo(info_bytes=b"de")),
    ],
)
def test_unmarshal(data, expected):
    assert MetaInfo.from_bencode(data) == expected


@pytest.mark.parametrize("data", [b"d4:infoe", b"d4:infoabce"])
def test_unmarshal_errors(data):
    with pytest.raises(BencodeError):
        MetaInfo.from_bencode(data)


def test_string_creation_date_is_ignored():
    meta = MetaInfo.from_bencode(b"d13:creation date23:29.03.2018 22:18:14 UTC4:infodee")
    assert meta == MetaInfo(info_bytes=b"de")


def test_unmarshal_empty_string_nodes():
    assert MetaInfo.from_bencode(b"d5:nodes0:e") == MetaInfo()


def _sample_info():
    return Info(
        piece_length=16384,
        pieces=bytes(range(40)),
        name="album",
        private=True,
        source="unit",
        files=[
            FileInfo(length=10, path=["disc1", "a.flac"]),
            FileInfo(length=20, path=["b.flac"], path_utf8=["b-é.flac"]),
        ],
    )


def test_file_round_trip_preserves_info_bytes():
    info = _sample_info()
    meta = MetaInfo(
        info_bytes=info.to_bencode(),
        announce="http://tracker.example.com/announce",
        announce_list=[["http://tracker.example.com/announce"], ["udp://backup.example.com:80"]],
        comment="sample",
    )
    loaded = load(io.BytesIO(meta.to_bencode()))
    assert loaded == meta
    parsed = loaded.unmarshal_info()
    assert parsed == info
    assert parsed.to_bencode() == loaded.info_bytes


def test_load_from_file(tmp_path):
    meta = MetaInfo(info_bytes=_sample_info().to_bencode(), announce="http://t.example.com/a")
    path = tmp_path / "sample.torrent"
    with open(path, "wb") as stream:
        meta.write(stream)
    assert load_from_file(path) == meta


def test_load_ignores_trailing_data():
    assert load(io.BytesIO(b"d4:infodeegarbage")) == MetaInfo(info_bytes=b"de")


def test_non_canonical_info_bytes_are_kept():
    raw_info = b"d12:piece lengthi1e4:name1:ae"
    meta = MetaInfo.from_bencode(b"d4:info" + raw_info + b"e")
    assert meta.info_bytes == raw_info
    assert meta.unmarshal_info().name == "a"


@pytest.mark.parametrize(
    "meta",
    [
        MetaInfo(),
        MetaInfo(info_bytes=b"de"),
        MetaInfo(info_bytes=Info(name="x", pieces=bytes(20), piece_length=1).to_bencode()),
        MetaInfo(announce="http://a.example.com", comment="c"),
    ],
)
def test_re_encoding_is_stable(meta):
    data = meta.to_bencode()
    again = MetaInfo.from_bencode(data)
    assert again == meta
    assert again.to_bencode() == data


def test_hash_info_bytes():
    meta = MetaInfo(info_bytes=b"de")
    digest = meta.hash_info_bytes()
    assert digest.hex() == hashlib.sha1(b"de").hexdigest()
    assert str(digest) == digest.hex()
    assert len(digest) == 20


def test_info_hash_rejects_wrong_length():
    with pytest.raises(ValueError):
        InfoHash(b"short")


def test_unmarshal_missing_info_raises():
    with pytest.raises(BencodeError):
        MetaInfo().unmarshal_info()


def test_info_type_mismatch_raises():
    with pytest.raises(BencodeError):
        Info.from_bencode(b"d4:namei1ee")


def test_info_must_be_dictionary():
    with pytest.raises(BencodeError):
        Info.from_bencode(b"le")


def test_total_length_and_pieces():
    info = _sample_info()
    assert info.total_length() == 30
    assert info.num_pieces() == 2
    assert Info(length=99).total_length() == 99


def test_best_names():
    assert Info(name="a", name_utf8="b").best_name() == "b"
    assert Info(name="a").best_name() == "a"
    assert FileInfo(path=["x"], path_utf8=["y"]).best_path() == ["y"]
    assert FileInfo(path=["x"]).best_path() == ["x"]


def test_private_false_round_trips():
    info = Info(private=False)
    assert Info.from_bencode(info.to_bencode()).private is False
    assert Info.from_bencode(Info().to_bencode()).private is None


def test_upverted_announce_list():
    assert MetaInfo(announce="a").upverted_announce_list() == [["a"]]
    assert MetaInfo(announce="a", announce_list=[["b"], ["c"]]).upverted_announce_list() == [["b"], ["c"]]
    assert MetaInfo().upverted_announce_list() == []
    assert MetaInfo(announce="a", announce_list=[[""]]).upverted_announce_list() == [["a"]]


@pytest.mark.parametrize(
    "announce_list, announce, expected",
    [
        ([], "", False),
        ([[""]], "x", False),
        ([[""]], "", True),
        ([["u"]], "x", True),
    ],
)
def test_overrides_announce(announce_list, announce, expected):
    assert overrides_announce(announce_list, announce) is expected


def test_distinct_values():
    assert distinct_values([["a", "b"], ["b", "c"], ["a"]]) == ["a", "b", "c"]