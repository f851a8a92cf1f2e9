"""calamar-search: one query across accounts, blocks, extrinsics and events on many networks."""
