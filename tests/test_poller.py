import pytest

from conftest import ScriptedStatus
from promptreel.errors import GenerationTimeoutError, TransientPollError
from promptreel.services.models import JobState, JobStatus
from promptreel.services.poller import poll_until_terminal


async def _poll(status_fn, clock, max_wait=3.0, poll_interval=1.0):
    return await poll_until_terminal(
        "job-1",
        status_fn,
        max_wait=max_wait,
        poll_interval=poll_interval,
        clock=clock,
        sleep=clock.sleep,
    )


@pytest.mark.asyncio
async def test_pending_past_deadline_times_out_after_exactly_three_checks(clock):
    status_fn = ScriptedStatus(JobStatus.pending())

    with pytest.raises(GenerationTimeoutError) as exc_info:
        await _poll(status_fn, clock, max_wait=3.0, poll_interval=1.0)

    assert len(status_fn.calls) == 3
    assert exc_info.value.job_id == "job-1"
    assert isinstance(exc_info.value, TimeoutError)


@pytest.mark.asyncio
async def test_check_count_rounds_up_for_uneven_intervals(clock):
    status_fn = ScriptedStatus(JobStatus.pending())

    with pytest.raises(GenerationTimeoutError):
        await _poll(status_fn, clock, max_wait=10.0, poll_interval=3.0)

    assert len(status_fn.calls) == 4


@pytest.mark.asyncio
async def test_completed_returns_immediately_with_result_urls(clock):
    status_fn = ScriptedStatus(
        JobStatus.pending(),
        JobStatus.completed(["https://cdn.test/a.mp4"]),
    )

    status = await _poll(status_fn, clock)

    assert status.state == JobState.COMPLETED
    assert status.result_urls == ("https://cdn.test/a.mp4",)
    assert len(status_fn.calls) == 2
    assert clock.sleeps == [1.0]


@pytest.mark.asyncio
async def test_failed_is_terminal_without_retry(clock):
    status_fn = ScriptedStatus(JobStatus.failed("content policy"))

    status = await _poll(status_fn, clock)

    assert status.state == JobState.FAILED
    assert status.reason == "content policy"
    assert len(status_fn.calls) == 1
    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_unknown_status_keeps_polling(clock):
    status_fn = ScriptedStatus(
        JobStatus.unknown(7),
        JobStatus.unknown("rendering"),
        JobStatus.completed(["https://cdn.test/a.mp4"]),
    )

    status = await _poll(status_fn, clock, max_wait=10.0)

    assert status.state == JobState.COMPLETED
    assert len(status_fn.calls) == 3


@pytest.mark.asyncio
async def test_transient_errors_are_absorbed(clock):
    status_fn = ScriptedStatus(
        TransientPollError("connection reset"),
        TransientPollError("bad json"),
        JobStatus.completed(["https://cdn.test/a.mp4"]),
    )

    status = await _poll(status_fn, clock, max_wait=10.0)

    assert status.state == JobState.COMPLETED
    assert clock.sleeps == [1.0, 1.0]


@pytest.mark.asyncio
async def test_transient_errors_until_deadline_time_out(clock):
    status_fn = ScriptedStatus(TransientPollError("down"))

    with pytest.raises(GenerationTimeoutError):
        await _poll(status_fn, clock)

    assert len(status_fn.calls) == 3


@pytest.mark.asyncio
async def test_unexpected_errors_propagate(clock):
    status_fn = ScriptedStatus(RuntimeError("bug"))

    with pytest.raises(RuntimeError):
        await _poll(status_fn, clock)

    assert len(status_fn.calls) == 1


@pytest.mark.parametrize(
    "status, terminal",
    [
        (JobStatus.pending(), False),
        (JobStatus.unknown(9), False),
        (JobStatus.completed(["https://cdn.test/a.mp4"]), True),
        (JobStatus.failed("boom"), True),
    ],
)
def test_is_terminal_only_for_completed_and_failed(status, terminal):
    assert status.is_terminal is terminal
