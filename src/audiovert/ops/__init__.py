"""Path and file operations.

Submodules:
    paths    -- Destination planning: in-place extension swap, mirroring under
                --to relative to the scan root, or the metadata-derived
                Artist/Album (Year)/[Disc]/track layout. Also the partial-file
                path and lexical same-path check used for self-conversion elision.
    transfer -- Dry-run aware mkdir, link/move/copy of plain files, atomic byte
                writes through a partial file (archive extraction), and bounded
                empty-directory cleanup after failed trash moves.
"""
