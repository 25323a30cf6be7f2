from conftest import valid_values
from ostsee.report.controller import StepController
from ostsee.schemas.report import SightingDraft


def test_next_blocks_on_errors():
    c = StepController()
    outcome = c.next({})
    assert outcome.moved is False
    assert c.current == 0
    assert {e.field for e in outcome.errors} >= {"sighting_date"}


def test_next_advances_and_marks_completed():
    c = StepController()
    outcome = c.next(valid_values())
    assert outcome.moved is True
    assert c.current == 1
    assert 0 in c.completed


def test_optional_step_passes_with_errors():
    c = StepController(current=2, completed={0, 1})
    outcome = c.next({"wind_force": 20})
    assert outcome.moved is True
    assert c.current == 3
    assert [e.field for e in outcome.errors] == ["wind_force"]
    assert 2 not in c.completed


def test_no_next_from_last_step():
    c = StepController(current=3, completed={0, 1, 2})
    assert c.next(valid_values()).moved is False
    assert c.is_ready(valid_values())


def test_back_stops_at_first_step():
    c = StepController(current=1, completed={0})
    assert c.back().moved is True
    assert c.back().moved is False
    assert c.current == 0


def test_go_to_requires_previous_steps():
    c = StepController()
    assert c.can_go_to(0)
    assert not c.can_go_to(2)
    assert c.go_to(2) is False
    c.completed = {0, 1}
    # the observations step is optional, so the contact step is reachable
    assert c.go_to(3) is True
    assert not c.can_go_to(7)


def test_revalidate_drops_completion():
    c = StepController(current=2, completed={0, 1})
    c.revalidate(1, valid_values(species=None))
    assert 1 not in c.completed
    assert not c.can_go_to(2)


def test_draft_round_trip():
    draft = SightingDraft(current_step=2, completed_steps=[0, 1])
    c = StepController.from_draft(draft)
    c.back()
    c.apply_to(draft)
    assert draft.current_step == 1
    assert draft.completed_steps == [0, 1]


def test_out_of_range_cursor_is_clamped():
    c = StepController(current=99, completed={0, 42})
    assert c.current == 3
    assert c.completed == {0}


def test_snapshot_and_submitted():
    c = StepController()
    c.mark_submitted()
    snap = c.snapshot()
    assert snap["submitted"] is True
    assert snap["completed_steps"] == [0, 1, 2, 3]
    assert [s["id"] for s in snap["steps"]] == ["location-time", "sighting-details", "observations", "contact"]
    assert all(s["reachable"] for s in snap["steps"])
