# tyr

Building blocks for a BitTorrent client, in pure Python. The package has no
third-party dependencies.

## Modules

- `tyr.bencode` provides `encode` and `decode` for bencoded data. It encodes
  ints, str, bytes, lists and mappings, and decodes dictionary keys as bytes.
  Malformed input raises `BencodeError`.
- `tyr.metainfo` reads `.torrent` files with `load(stream)` or
  `load_from_file(path)`.
  - `MetaInfo` keeps the info dictionary as its original bytes.
    `hash_info_bytes()` returns its SHA-1 as an `InfoHash`.
    `unmarshal_info()` parses it into an `Info`, which holds a list of
    `FileInfo` entries.
  - `upverted_announce_list()` returns the announce list, or the single
    announce URL as one tier.
  - The module also has the helpers `overrides_announce` and
    `distinct_values`.
- `tyr.meta` provides `from_torrent(metainfo)`. It flattens a torrent into a
  frozen `Info` with a per-piece hash list, `File` entries, the total length
  and the size of the last piece. It raises `InvalidLengthError` when the
  piece length is not positive, or when the piece count does not match the
  total length.
- `tyr.bep40` implements canonical peer priority as defined by BEP 40.
  - `priority4` and `priority6` take `(ipaddress, port)` tuples.
  - `simple_priority` is used when the local address is unknown.
  - `peer_priority` picks between the two.
  - `crc32c` is the checksum they use.
- `tyr.config` provides `load_from_file(path)`, which reads a TOML file into
  `Config` and `Application`. It raises `ConfigError` on bad input.
- `tyr.mse` chooses the encryption method for a stream-encryption handshake.
  It has the `CryptoMethod` flags, the selectors `force_crypto`,
  `prefer_crypto` and `prefer_not_crypto`, and `crypto_selector(mode)`.
  `crypto_selector` maps `"force"`, `"prefer"` (also `""`), `"prefer-not"`
  and `"disable"` to a selector. `"disable"` gives `None`. Any other mode
  raises `ValueError`.
- `tyr.pieces` maps pieces to file regions.
  - `piece_file_chunks` and `build_piece_infos` return `FileChunk` values.
  - `piece_chunk`, `piece_chunks` and `piece_chunk_len` split pieces into
    16 KiB `ChunkRequest` blocks.
  - `pieces_to_check` and `check_pieces` find and verify pieces that are
    already on disk.
- `tyr.download` provides:
  - the download `State` enum;
  - `canonical_name`;
  - `rank_pieces`, which returns `Priority` entries, most common pieces
    first;
  - `Resume` records, bencoded with `to_bencode()`;
  - `resume_path`.
- `tyr.tracker` works with tracker announces.
  - `parse_announce_response` decodes announce replies into an
    `AnnounceResult`. It handles compact, non-compact and IPv6 peer lists.
  - `parse_compact_peers`, `parse_compact_peers6` and
    `parse_non_compact_peers` parse the individual peer formats.
  - `announce_params` builds the query parameters of an announce.
  - `PeerQueue` keeps candidate peers, highest priority first.
  - Unreadable replies raise `TrackerError`.
- `tyr.peer` has peer-wire helpers: `new_peer_id`, `parse_peer_id`,
  `decode_bitfield`, `is_valid_request` and `check_message_size`. Protocol
  violations raise `InvalidPeerDataError`.

## Example

```python
from ipaddress import ip_address

from tyr import bep40, meta, metainfo

mi = metainfo.load_from_file("example.torrent")
info = meta.from_torrent(mi)
print(info.name, info.hash.hex(), info.num_pieces)

for tier in mi.upverted_announce_list():
    print(tier)

client = (ip_address("123.213.32.10"), 0)
peer = (ip_address("98.76.54.32"), 0)
print(hex(bep40.priority4(client, peer)))  # 0xec2d7224
```

## Configuration

`tyr.config.load_from_file` reads an `[application]` table. It recognises
these keys: `download-dir`, `crypto`, `max-http-parallel`, `p2p-port`,
`num-want`, `global-connections-limit` and `fallocate`.

A missing file yields the defaults:

- `max-http-parallel` is 100.
- `global-connections-limit` is 50.
- `crypto` is empty, which `crypto_selector` treats as `"prefer"`.
- `download-dir` is `~/downloads` when it is not set.

## What it does not do

This package has the data formats and the decisions a client needs. It does
not itself:

- open network connections, or perform the encryption handshake;
- send HTTP requests to trackers;
- exchange pieces with peers, or write downloaded data to disk;
- offer a command-line program or a long-running service.

## Running the tests

```
pip install -e .[test]
pytest
```