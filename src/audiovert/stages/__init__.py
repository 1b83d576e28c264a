"""Run stages, in order.

Pipeline order: discover -> plan -> execute -> trash

Stages:
    discover -- Walk every input path (sorted, so runs are reproducible),
                register plain files and archives in the SourceRegistry,
                enumerate archive entries (rejecting names that escape the
                archive), and record each recognized source with its format.
                Unrecognized extensions become Unsupported diagnostics,
                unreadable directories and broken archives become errors.
                Partial files are skipped.
    plan -- Match each source against the conversion rules, read tags when
            --meta is set (failures and --meta-dump output recorded per
            source), compute destinations, elide self-conversions, pick
            Transfer (copy for archives, move with --move, else link) or
            Convert, and reconcile with existing destinations and stale
            partial files. Produces the dense, stable task list.
    execute -- Run pending pre-removals, then convert via ffmpeg into the
               partial file and rename it into place, or link/move/copy the
               source. Archive bytes are piped to ffmpeg on stdin or written
               atomically. Every step reports through the Out sink and is a
               no-op under --dry-run.
    trash -- With --trash-source, move plain-file sources whose tasks all
             completed (and none moved them) into the trash directory,
             suffixing clashing names. Failed moves trigger bounded
             empty-directory cleanup.
"""
