"""Draft session — the recording-in-progress state machine.

One ``DraftSession`` is owned by whichever flow is recording. It holds the
live segment list and the redo stack, persists both, and cleans up media
files nobody references any more.

Operations are expected to be awaited one at a time by a single caller.
Persistence failures are logged, the in-memory state is rolled back as a
whole and the operation returns False.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from draftreel.drafts.autosave import Debouncer
from draftreel.drafts.file_store import FileStore
from draftreel.drafts.storage import DraftStorage
from draftreel.editing.edl_builder import build_edl
from draftreel.models.draft import Draft, DraftMode, RedoEntry
from draftreel.models.edl import EditDecisionList
from draftreel.models.segment import RecordingSegment
from draftreel.utils.progress import log, log_error, log_step, log_success, log_warning


@dataclass
class _Snapshot:
    segments: list[RecordingSegment]
    redo_stack: list[RecordingSegment]
    last_persisted_segment_count: int
    current_draft_id: str | None
    has_started_over: bool
    force_new_id: bool
    detached_draft_id: str | None
    abandoned_draft_id: str | None
    released: list[tuple[str, bool]] = field(default_factory=list)


class DraftSession:
    """Owns segments, undo/redo and auto-save for one recording flow.

    Args:
        storage: Draft metadata storage
        files: Managed media storage
        mode: Draft namespace; upload sessions never auto-resume
        draft_id: Draft to load explicitly; also the preferred id when a
            new draft has to be created
        duration_budget: Recording ceiling in seconds, used by auto-save
        autosave_delay_ms: Quiet period before an auto-save pass
    """

    def __init__(
        self,
        storage: DraftStorage,
        files: FileStore,
        *,
        mode: DraftMode = "camera",
        draft_id: str | None = None,
        duration_budget: float = 60.0,
        autosave_delay_ms: int = 1000,
    ) -> None:
        self.storage = storage
        self.files = files
        self.mode = mode
        self.draft_id = draft_id
        self.duration_budget = duration_budget

        self.segments: list[RecordingSegment] = []
        self.redo_stack: list[RecordingSegment] = []
        self.current_draft_id: str | None = None
        self.original_draft_id: str | None = None
        self.has_started_over = False
        self.is_continuing_last_draft = False
        self.last_persisted_segment_count = 0

        self._loading = False
        self._force_new_id = False
        # Draft whose metadata a terminal undo removed; its files back the redo stack
        self._detached_draft_id: str | None = None
        # Draft left behind by start_over, removed on close or on the next fresh save
        self._abandoned_draft_id: str | None = None
        self._stale_refs: list[str] = []
        # Whether the stored redo entry was loaded or written by this session
        self._owns_stored_redo = False
        # (draft_id, with_metadata) directories to delete after a successful save
        self._released: list[tuple[str, bool]] = []
        self._autosave = Debouncer(autosave_delay_ms / 1000, self._autosave_pass)

    @property
    def can_undo(self) -> bool:
        return bool(self.segments)

    @property
    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    @property
    def kept_duration_seconds(self) -> float:
        return sum(s.kept_duration_ms() for s in self.segments) / 1000

    def edl(self) -> EditDecisionList:
        return build_edl(self.segments)

    # Loading

    async def load(self) -> Draft | None:
        """Load the explicit draft, or resume the latest one.

        A pending redo stack takes priority over auto-resume: if it belongs
        to a stored draft that draft is loaded with it, otherwise the
        session starts empty with only the redo stack, so redo is the way
        back in. Missing media is pruned from both.
        """
        self._loading = True
        try:
            return await self._load()
        except Exception as e:
            log_error(f"Error loading draft: {e}")
            self.segments = []
            self.redo_stack = []
            self.current_draft_id = None
            self.original_draft_id = None
            self.last_persisted_segment_count = 0
            self.is_continuing_last_draft = False
            return None
        finally:
            self._loading = False

    async def _load(self) -> Draft | None:
        redo = await self.storage.get_redo_entry()
        if redo is not None and redo.mode != self.mode:
            redo = None
        pending = redo is not None and bool(redo.segments)

        draft: Draft | None = None
        if self.draft_id:
            draft = await self.storage.get_draft(self.draft_id, self.mode)
            self.is_continuing_last_draft = False
        elif self.mode == "camera":
            if pending and redo.draft_id:
                draft = await self.storage.get_draft(redo.draft_id, self.mode)
            elif not pending:
                draft = await self.storage.get_last_modified_draft(self.mode)
            self.is_continuing_last_draft = draft is not None and not pending

        if draft is not None:
            draft = await self.storage.prune_missing_segments(draft)
            self.is_continuing_last_draft = self.is_continuing_last_draft and draft is not None

        if draft is not None:
            self.segments = list(draft.segments)
            self.current_draft_id = draft.id
            self.original_draft_id = draft.id
            self.last_persisted_segment_count = len(draft.segments)
            log_step("Draft", f"Loaded draft {draft.id} ({len(draft.segments)} segments)")

        if redo is not None and self._owns_redo(redo, draft):
            kept = [s for s in redo.segments if await self.files.file_exists(s.media_ref)]
            if len(kept) != len(redo.segments):
                log_warning(
                    f"Redo stack: {len(redo.segments) - len(kept)} segment file(s) missing, pruned"
                )
            self.redo_stack = kept
            self._owns_stored_redo = True
            if draft is None and redo.draft_id:
                self._detached_draft_id = redo.draft_id
                self.original_draft_id = redo.draft_id
            if len(kept) != len(redo.segments):
                await self._save_redo_entry()

        return draft

    def _owns_redo(self, redo: RedoEntry, draft: Draft | None) -> bool:
        if draft is not None:
            return redo.draft_id == draft.id
        if self.draft_id:
            return redo.draft_id == self.draft_id
        return self.mode == "camera"

    # Recording

    async def append_segment(
        self,
        segment: RecordingSegment,
        duration_budget: float | None = None,
    ) -> bool:
        """Import a new recording and append it.

        A new recording clears the redo stack for good; the files behind it
        are deleted once the draft metadata has been saved.
        """
        budget = self._budget(duration_budget)
        self._check_unique(segment.id)
        self._autosave.cancel()

        target_id = (
            self.current_draft_id
            or self._preferred_draft_id()
            or await self.storage.mint_draft_id()
        )

        try:
            await self.files.ensure_dirs(target_id)
            managed_ref = await self.files.import_media(target_id, segment.media_ref, segment.id)
        except Exception as e:
            log_error(f"Import failed for segment {segment.id}: {e}")
            return False

        snapshot = self._snapshot()
        cleared = self.redo_stack
        self.redo_stack = []
        self.segments = [*self.segments, segment.model_copy(update={"media_ref": managed_ref})]

        try:
            await self._persist(budget, preferred_id=target_id)
        except Exception as e:
            log_error(f"Save failed: {e}")
            self._restore(snapshot)
            await self._delete_refs([managed_ref])
            return False

        if self.kept_duration_seconds > budget:
            log_warning(
                f"Draft {self.current_draft_id} is over budget "
                f"({self.kept_duration_seconds:.1f}s of {budget:.0f}s)"
            )

        self._stale_refs.extend(s.media_ref for s in cleared)
        await self._save_redo_entry()
        await self._cleanup()
        return True

    async def trim_segment(
        self,
        segment_id: str,
        trim_in_ms: float | None,
        trim_out_ms: float | None,
        duration_budget: float | None = None,
    ) -> bool:
        """Set a segment's in/out points and save."""
        index = next((i for i, s in enumerate(self.segments) if s.id == segment_id), None)
        if index is None:
            raise ValueError(f"No such segment: {segment_id}")

        segment = self.segments[index]
        start = trim_in_ms if trim_in_ms is not None else 0
        end = trim_out_ms if trim_out_ms is not None else segment.full_duration_ms
        if start < 0 or end > segment.full_duration_ms or end <= start:
            raise ValueError(
                f"Invalid trim [{start}, {end}] for segment of {segment.full_duration_ms:g}ms"
            )

        snapshot = self._snapshot()
        trimmed = segment.model_copy(update={"trim_in_ms": trim_in_ms, "trim_out_ms": trim_out_ms})
        self.segments = [*self.segments[:index], trimmed, *self.segments[index + 1:]]

        if self.current_draft_id:
            try:
                await self.storage.update_draft(
                    self.current_draft_id, self.segments, self._budget(duration_budget), self.mode
                )
            except Exception as e:
                log_error(f"Trim failed: {e}")
                self._restore(snapshot)
                return False
        return True

    def set_segments(self, segments: list[RecordingSegment]) -> None:
        """Replace the segment list and schedule an auto-save.

        Must be called with the event loop running. Refs are expected to be
        managed already.
        """
        ids = [s.id for s in segments]
        if len(set(ids)) != len(ids):
            raise ValueError("Segment ids must be unique within a draft")
        self.segments = list(segments)
        self._autosave.schedule()

    async def wait_for_autosave(self) -> None:
        await self._autosave.drain()

    async def _autosave_pass(self) -> None:
        if self._loading or not self.segments:
            return
        if len(self.segments) <= self.last_persisted_segment_count:
            return
        try:
            await self._persist(self.duration_budget)
        except Exception as e:
            log_error(f"Auto-save failed: {e}")
            return
        log_step("Autosave", f"Saved draft {self.current_draft_id}")
        await self._cleanup()

    # Undo / redo

    async def undo(self, duration_budget: float | None = None) -> bool:
        """Move the last segment onto the redo stack.

        Undoing the only segment deletes the draft's metadata but keeps its
        files, which the redo stack still points at.
        """
        if not self.segments:
            return False

        self._autosave.cancel()
        snapshot = self._snapshot()
        last = self.segments[-1]
        self.segments = self.segments[:-1]
        self.redo_stack = [*self.redo_stack, last]
        self.last_persisted_segment_count = len(self.segments)

        if self.current_draft_id:
            try:
                if not self.segments:
                    await self.storage.delete_metadata_only(self.current_draft_id, self.mode)
                    self._detached_draft_id = self.current_draft_id
                    self.current_draft_id = None
                    self.has_started_over = False
                else:
                    await self.storage.update_draft(
                        self.current_draft_id, self.segments, self._budget(duration_budget), self.mode
                    )
            except Exception as e:
                log_error(f"Undo failed: {e}")
                self._restore(snapshot)
                return False

        await self._save_redo_entry()
        log_step("Undo", f"{len(self.segments)} segment(s), {len(self.redo_stack)} to redo")
        return True

    async def redo(self, duration_budget: float | None = None) -> bool:
        """Put the most recently undone segment back.

        If the last undo removed the draft, it is recreated under its old id
        so the files already on disk are reattached.
        """
        if not self.redo_stack:
            return False

        self._autosave.cancel()
        snapshot = self._snapshot()
        restored = self.redo_stack[-1]
        self.redo_stack = self.redo_stack[:-1]
        self.segments = [*self.segments, restored]

        try:
            await self._persist(self._budget(duration_budget))
        except Exception as e:
            log_error(f"Redo failed: {e}")
            self._restore(snapshot)
            return False

        await self._save_redo_entry()
        await self._cleanup()
        log_step("Redo", f"{len(self.segments)} segment(s), {len(self.redo_stack)} to redo")
        return True

    # Lifecycle

    def start_over(self) -> None:
        """Abandon everything recorded so far. Files go on ``close()``."""
        abandoned = self.current_draft_id or self.original_draft_id
        self._stale_refs.extend(s.media_ref for s in self.segments)
        self._reset_local()
        self._abandoned_draft_id = abandoned
        self.has_started_over = True

    def start_new(self) -> None:
        """Leave the current draft as it is; the next recording gets a new id."""
        self._reset_local()
        self._force_new_id = True

    async def save_as_draft(
        self,
        duration_budget: float | None = None,
        force_new: bool = False,
    ) -> bool:
        """Save the live segments as a draft and clear the session."""
        if not self.segments:
            log_warning("Nothing to save")
            return False

        self._autosave.cancel()
        budget = self._budget(duration_budget)
        snapshot = self._snapshot()

        try:
            if self.current_draft_id and not self.has_started_over and not force_new:
                await self.storage.update_draft(self.current_draft_id, self.segments, budget, self.mode)
                saved_id = self.current_draft_id
            else:
                previous_id = self.current_draft_id
                preferred = None if force_new else self._preferred_draft_id()
                target_id = preferred or await self.storage.mint_draft_id()
                moved = await self._relocate_segments(target_id)
                try:
                    saved_id = await self.storage.save_draft(
                        self.segments, budget, self.mode, preferred_id=target_id
                    )
                except Exception:
                    await self._delete_refs([new for _, new in moved])
                    raise
                if previous_id and previous_id != saved_id:
                    # Files were copied into the new draft; the old one goes entirely
                    await self.storage.delete_metadata_only(previous_id, self.mode)
                    self._released.append((previous_id, False))
                self._stale_refs.extend(old for old, _ in moved)
                self._adopt(saved_id)
        except Exception as e:
            log_error(f"Save failed: {e}")
            self._restore(snapshot)
            return False

        log_success(f"Saved draft {saved_id}")
        self._reset_local()
        self.original_draft_id = None
        self._force_new_id = True
        await self._save_redo_entry()
        await self._cleanup()
        return True

    async def close(self) -> None:
        """Tear the session down, deleting whatever has no resume path left."""
        self._autosave.cancel()

        if self.has_started_over and not self.segments and self._abandoned_draft_id:
            try:
                await self.storage.delete_files_and_metadata(self._abandoned_draft_id, self.mode)
                log(f"Deleted original draft {self._abandoned_draft_id}")
            except Exception as e:
                log_error(f"Delete failed: {e}")
            self._abandoned_draft_id = None

        if not self.segments:
            self._stale_refs.extend(s.media_ref for s in self.redo_stack)
            self.redo_stack = []
            if self._detached_draft_id:
                self._released.append((self._detached_draft_id, False))
                self._detached_draft_id = None
            await self._save_redo_entry()
            await self._cleanup()

    # Internals

    def _budget(self, duration_budget: float | None) -> float:
        return self.duration_budget if duration_budget is None else duration_budget

    def _check_unique(self, segment_id: str) -> None:
        if any(s.id == segment_id for s in [*self.segments, *self.redo_stack]):
            raise ValueError(f"Segment id already in use: {segment_id}")

    def _preferred_draft_id(self) -> str | None:
        """Id to reuse when a draft has to be created, or None to mint one."""
        if self._force_new_id:
            return None
        return self._detached_draft_id or self.draft_id or self.original_draft_id

    async def _persist(self, budget: float, preferred_id: str | None = None) -> None:
        if self.current_draft_id:
            await self.storage.update_draft(self.current_draft_id, self.segments, budget, self.mode)
        else:
            new_id = await self.storage.save_draft(
                self.segments,
                budget,
                self.mode,
                preferred_id=preferred_id or self._preferred_draft_id(),
            )
            self._adopt(new_id)
        self.last_persisted_segment_count = len(self.segments)

    async def _relocate_segments(self, draft_id: str) -> list[tuple[str, str]]:
        """Copy live segment files into ``draft_id``'s directory.

        Returns (old_ref, new_ref) pairs for the files that were copied.
        Copies made before a failure are deleted again.
        """
        moved: list[tuple[str, str]] = []
        relocated: list[RecordingSegment] = []
        try:
            await self.files.ensure_dirs(draft_id)
            for segment in self.segments:
                new_ref = await self.files.copy_into_draft(draft_id, segment.media_ref, segment.id)
                if new_ref != segment.media_ref:
                    moved.append((segment.media_ref, new_ref))
                relocated.append(segment.model_copy(update={"media_ref": new_ref}))
        except Exception:
            await self._delete_refs([new for _, new in moved])
            raise

        if moved:
            log_step("Draft", f"Copied {len(moved)} segment(s) into draft {draft_id}")
        self.segments = relocated
        return moved

    def _adopt(self, draft_id: str) -> None:
        """Make a freshly saved draft current, releasing any draft it replaces."""
        if self._abandoned_draft_id and self._abandoned_draft_id != draft_id:
            self._released.append((self._abandoned_draft_id, True))
        if self._detached_draft_id and self._detached_draft_id != draft_id:
            self._released.append((self._detached_draft_id, False))
        self._abandoned_draft_id = None
        self._detached_draft_id = None
        self.current_draft_id = draft_id
        self.has_started_over = False
        self._force_new_id = False

    async def _save_redo_entry(self) -> None:
        try:
            if self.redo_stack:
                await self.storage.save_redo_entry(RedoEntry(
                    draft_id=self.current_draft_id or self._detached_draft_id,
                    mode=self.mode,
                    segments=self.redo_stack,
                ))
                self._owns_stored_redo = True
                return
            if self._owns_stored_redo:
                await self.storage.clear_redo_entry()
                self._owns_stored_redo = False
        except Exception as e:
            log_error(f"Error saving redo stack: {e}")

    async def _cleanup(self) -> None:
        """Delete stale files and released drafts that nothing references."""
        live = {s.media_ref for s in self.segments} | {s.media_ref for s in self.redo_stack}
        doomed = [ref for ref in dict.fromkeys(self._stale_refs) if ref not in live]
        self._stale_refs = []
        released, self._released = self._released, []

        if doomed:
            await self._delete_refs(doomed)
        for draft_id, with_metadata in released:
            try:
                if with_metadata:
                    await self.storage.delete_files_and_metadata(draft_id, self.mode)
                else:
                    await self.files.delete_draft_directory(draft_id)
            except Exception as e:
                log_warning(f"Could not release draft {draft_id}: {e}")

    async def _delete_refs(self, refs: list[str]) -> None:
        try:
            await self.files.delete_refs(refs)
        except Exception as e:
            log_warning(f"Could not delete {len(refs)} file(s): {e}")

    def _reset_local(self) -> None:
        self._autosave.cancel()
        self._stale_refs.extend(s.media_ref for s in self.redo_stack)
        self.segments = []
        self.redo_stack = []
        self.current_draft_id = None
        self.last_persisted_segment_count = 0
        self.is_continuing_last_draft = False

    def _snapshot(self) -> _Snapshot:
        return _Snapshot(
            segments=list(self.segments),
            redo_stack=list(self.redo_stack),
            last_persisted_segment_count=self.last_persisted_segment_count,
            current_draft_id=self.current_draft_id,
            has_started_over=self.has_started_over,
            force_new_id=self._force_new_id,
            detached_draft_id=self._detached_draft_id,
            abandoned_draft_id=self._abandoned_draft_id,
            released=list(self._released),
        )

    def _restore(self, snapshot: _Snapshot) -> None:
        self.segments = snapshot.segments
        self.redo_stack = snapshot.redo_stack
        self.last_persisted_segment_count = snapshot.last_persisted_segment_count
        self.current_draft_id = snapshot.current_draft_id
        self.has_started_over = snapshot.has_started_over
        self._force_new_id = snapshot.force_new_id
        self._detached_draft_id = snapshot.detached_draft_id
        self._abandoned_draft_id = snapshot.abandoned_draft_id
        self._released = snapshot.released
