import pytest

from shipline.datacls import PipelineRun, RunState
from shipline.exceptions import ShiplineError


class TestRunStateMachine:

    def test_linear_success_path(self):
        run = PipelineRun(name='svc')
        for state in (RunState.BUILDING, RunState.PUSHING, RunState.DEPLOYING, RunState.SUCCEEDED):
            run.advance(state)
        assert run.succeeded
        assert run.outcome == "Succeeded"
        assert run.finished_at is not None

    @pytest.mark.parametrize("skip_to", [RunState.PUSHING, RunState.DEPLOYING, RunState.SUCCEEDED])
    def test_states_cannot_be_skipped(self, skip_to):
        run = PipelineRun(name='svc')
        with pytest.raises(ShiplineError, match="Illegal transition"):
            run.advance(skip_to)

    def test_no_cycles(self):
        run = PipelineRun(name='svc')
        run.advance(RunState.BUILDING)
        run.advance(RunState.PUSHING)
        with pytest.raises(ShiplineError, match="Illegal transition"):
            run.advance(RunState.BUILDING)

    @pytest.mark.parametrize("steps_done", [0, 1, 2, 3])
    def test_failure_reachable_from_any_non_terminal_state(self, steps_done):
        run = PipelineRun(name='svc')
        for state in (RunState.BUILDING, RunState.PUSHING, RunState.DEPLOYING)[:steps_done]:
            run.advance(state)
        run.fail('push', 'denied')
        assert run.state is RunState.FAILED
        assert run.outcome == "Failed(step='push', cause='denied')"

    def test_terminal_states_are_final(self):
        run = PipelineRun(name='svc')
        run.advance(RunState.BUILDING)
        run.fail('build', 'error[E0425]')
        with pytest.raises(ShiplineError, match="already finished"):
            run.advance(RunState.PUSHING)
        with pytest.raises(ShiplineError, match="already finished"):
            run.fail('build', 'again')
