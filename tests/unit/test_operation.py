"""Unit tests for the per-coordinator operation state."""

import asyncio

import pytest

from ragpilot.core.operation import CANCELLED_MESSAGE, OperationInProgressError, OperationState


class TestOutcomes:

    def test_succeed_clears_error(self):
        state = OperationState(last_error="old")
        state.succeed("done")
        assert state.last_message == "done"
        assert state.last_error is None

    def test_fail_clears_message(self):
        state = OperationState(last_message="old")
        state.fail("broken")
        assert state.last_error == "broken"
        assert state.last_message is None


class TestPending:

    @pytest.mark.asyncio
    async def test_loading_only_inside_block(self):
        state = OperationState()
        async with state.pending("op"):
            assert state.is_loading
            assert state.active_operation == "op"
        assert not state.is_loading
        assert state.active_operation is None

    @pytest.mark.asyncio
    async def test_clears_previous_outcome(self):
        state = OperationState(last_error="stale")
        async with state.pending("op"):
            assert state.last_error is None

    @pytest.mark.asyncio
    async def test_keep_previous_outcome(self):
        state = OperationState(last_message="keep")
        async with state.pending("op", clear=False):
            assert state.last_message == "keep"

    @pytest.mark.asyncio
    async def test_nested_entry_rejected(self):
        state = OperationState()
        async with state.pending("first"):
            with pytest.raises(OperationInProgressError) as exc:
                async with state.pending("second"):
                    pass
            assert exc.value.operation == "second"
            assert state.is_loading
        assert not state.is_loading

    @pytest.mark.asyncio
    async def test_exception_resets_loading(self):
        state = OperationState()
        with pytest.raises(RuntimeError):
            async with state.pending("op"):
                raise RuntimeError("boom")
        assert not state.is_loading

    @pytest.mark.asyncio
    async def test_cancellation_recorded(self):
        state = OperationState()
        started = asyncio.Event()

        async def work():
            async with state.pending("op"):
                started.set()
                await asyncio.Event().wait()

        task = asyncio.create_task(work())
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert not state.is_loading
        assert state.last_error == CANCELLED_MESSAGE
