import hashlib
import os

import pytest

from tyr.meta import File, InvalidLengthError, from_torrent
from tyr.metainfo import FileInfo, Info, InfoHash, MetaInfo

PIECE = 16384


def _pieces(count):
    return b"".join(hashlib.sha1(bytes([i])).digest() for i in range(count))


def _meta(info):
    return MetaInfo(info_bytes=info.to_bencode(), announce="http://tracker.example.com/announce")


def test_single_file_torrent():
    info = Info(piece_length=PIECE, pieces=_pieces(3), name="a.txt", length=40000)
    meta = _meta(info)
    result = from_torrent(meta)
    assert result.name == "a.txt"
    assert result.files == [File(path="a.txt", length=40000)]
    assert result.total_length == 40000
    assert result.num_pieces == 3
    assert result.piece_length == PIECE
    assert result.piece_length * (result.num_pieces - 1) + result.last_piece_size == 40000
    assert 0 < result.last_piece_size <= PIECE


def test_pieces_split_into_hashes():
    raw = _pieces(3)
    result = from_torrent(_meta(Info(piece_length=PIECE, pieces=raw, name="a", length=40000)))
    assert all(isinstance(p, InfoHash) for p in result.pieces)
    assert b"".join(result.pieces) == raw
    assert result.pieces[0] == hashlib.sha1(bytes([0])).digest()


def test_hash_matches_metainfo():
    meta = _meta(Info(piece_length=PIECE, pieces=_pieces(1), name="a", length=10))
    assert from_torrent(meta).hash == meta.hash_info_bytes()


def test_multi_file_torrent_paths():
    info = Info(
        piece_length=PIECE,
        pieces=_pieces(2),
        name="bundle",
        files=[
            FileInfo(length=20000, path=["dir", "x.bin"]),
            FileInfo(length=5000, path=["raw"], path_utf8=["utf"]),
        ],
    )
    result = from_torrent(_meta(info))
    assert result.files == [
        File(path=os.path.join("dir", "x.bin"), length=20000),
        File(path="utf", length=5000),
    ]
    assert result.total_length == 25000
    assert result.name == "bundle"


def test_best_name_prefers_utf8():
    info = Info(piece_length=PIECE, pieces=_pieces(1), name="plain", name_utf8="nice", length=1)
    result = from_torrent(_meta(info))
    assert result.name == "nice"
    assert result.files[0].path == "nice"


@pytest.mark.parametrize("flag, expected", [(None, False), (True, True), (False, False)])
def test_private_flag(flag, expected):
    info = Info(piece_length=PIECE, pieces=_pieces(1), name="a", length=1, private=flag)
    assert from_torrent(_meta(info)).private is expected


def test_exact_multiple_has_full_last_piece():
    info = Info(piece_length=PIECE, pieces=_pieces(2), name="a", length=PIECE * 2)
    assert from_torrent(_meta(info)).last_piece_size == PIECE


@pytest.mark.parametrize("count", [1, 4])
def test_piece_count_mismatch(count):
    info = Info(piece_length=PIECE, pieces=_pieces(count), name="a", length=40000)
    with pytest.raises(InvalidLengthError):
        from_torrent(_meta(info))


def test_zero_piece_length_rejected():
    info = Info(piece_length=0, pieces=_pieces(1), name="a", length=10)
    with pytest.raises(InvalidLengthError):
        from_torrent(_meta(info))