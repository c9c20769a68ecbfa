"""BitTorrent client building blocks: bencode, metainfo, peer priority, pieces and trackers."""

__version__ = "0.1.0"

__all__ = [
    "bencode",
    "bep40",
    "config",
    "download",
    "meta",
    "metainfo",
    "mse",
    "peer",
    "pieces",
    "tracker",
]