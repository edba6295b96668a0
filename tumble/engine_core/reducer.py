"""
Reducer - Applies actions to a simulation session.

The reducer is the single entry point for changes requested from outside
the engine (UI, API, CLI). The stepper and the gear synchronizer do the
actual work; the reducer validates, keeps the undo boards up to date and
reports what happened.

Design principles:
- Mutates the session in place (the board is single-writer)
- Validates before applying
- Expected problems become failed ActionResults, never exceptions
"""

from __future__ import annotations
from dataclasses import dataclass
import logging

from .action import Action, ActionType, ActionResult, EDIT_ACTIONS
from .board import Board
from .gears import normalize_component, toggle_component
from .parts import PartKind
from .state import SimulationSession, Reservoir
from .topology import CellKind
from . import stepper


logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Reducer applies actions to a session.

    Stateless - all state is in SimulationSession.
    """

    def apply(self, session: SimulationSession, action: Action) -> ActionResult:
        """
        Apply an action to the session.

        Returns an ActionResult describing the outcome.
        """
        validation_error = self._validate_action(session, action)
        if validation_error:
            return ActionResult.failure(validation_error, error_code="INVALID_ACTION")

        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code="NO_HANDLER",
            )

        try:
            result = handler(session, action)
        except AssertionError:
            raise
        except Exception as e:
            logger.exception("Handler for %s failed", action.action_type.value)
            return ActionResult.failure(str(e), error_code="HANDLER_ERROR")

        if result.success and action.action_type in EDIT_ACTIONS:
            session.action_history.append(action)
        return result

    def _validate_action(self, session: SimulationSession, action: Action) -> str | None:
        """
        Check that the payload carries what the action needs.

        Returns error message if invalid, None if valid.
        """
        payload = action.payload
        cell_actions = {
            ActionType.PLACE_PART,
            ActionType.CLEAR_CELL,
            ActionType.HAND_TOGGLE,
            ActionType.PLACE_BALL,
        }
        if action.action_type in cell_actions:
            if payload.x is None or payload.y is None:
                return f"{action.action_type.value} needs x and y"

        if action.action_type == ActionType.PLACE_PART and payload.part is None:
            return "place_part needs a part"

        color_actions = {ActionType.LAUNCH, ActionType.PLACE_BALL, ActionType.ADJUST_MARBLES}
        if action.action_type in color_actions and payload.color is None:
            return f"{action.action_type.value} needs a marble color"

        if action.action_type == ActionType.ADJUST_MARBLES and payload.delta is None:
            return "adjust_marbles needs a delta"

        if action.action_type == ActionType.SET_MARBLE_DEFAULT:
            if payload.count is None or payload.count < 0:
                return "set_marble_default needs a non-negative count"

        if action.action_type == ActionType.LOAD_DEMO and not payload.name:
            return "load_demo needs a demo name"

        if action.action_type in (ActionType.LOAD_TEXT, ActionType.LOAD_URL):
            if payload.text is None:
                return f"{action.action_type.value} needs text"

        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.PLACE_PART: self._handle_place_part,
            ActionType.CLEAR_CELL: self._handle_clear_cell,
            ActionType.HAND_TOGGLE: self._handle_hand_toggle,
            ActionType.ERASE: self._handle_erase,
            ActionType.UNDO: self._handle_undo,
            ActionType.STORE: self._handle_store,
            ActionType.RECALL: self._handle_recall,
            ActionType.LAUNCH: self._handle_launch,
            ActionType.STEP: self._handle_step,
            ActionType.STEP_BACK: self._handle_step_back,
            ActionType.REMOVE_BALL: self._handle_remove_ball,
            ActionType.PLACE_BALL: self._handle_place_ball,
            ActionType.RESET: self._handle_reset,
            ActionType.RESTART: self._handle_restart,
            ActionType.ADJUST_MARBLES: self._handle_adjust_marbles,
            ActionType.SET_MARBLE_DEFAULT: self._handle_set_marble_default,
            ActionType.LOAD_DEMO: self._handle_load_demo,
            ActionType.LOAD_TEXT: self._handle_load_text,
            ActionType.LOAD_URL: self._handle_load_url,
        }
        return handlers.get(action_type)

    # =========================================================================
    # Editing
    # =========================================================================

    def _remember_for_undo(self, session: SimulationSession, tool: str) -> None:
        """Save the board before an edit, once per run of the same tool."""
        if tool != session.last_edit_tool:
            session.undo_board = session.board.copy()
        session.last_edit_tool = tool

    def _handle_place_part(self, session: SimulationSession, action: Action) -> ActionResult:
        """
        Draw a part on a cell.

        Drawing the part a cell already holds clears it. On a gear pin only
        gears exist: the gear and gear bit tools put or remove a gear, other
        tools can only remove one.
        """
        x, y, part = action.payload.x, action.payload.y, action.payload.part
        board = session.board
        if not session.topology.in_bounds(x, y):
            return ActionResult.failure(f"({x}, {y}) is off the board", error_code="OUT_OF_BOUNDS")

        kind = board.cell_kind(x, y)
        current = board.get(x, y)

        if kind == CellKind.OUT_OF_PLAY:
            return ActionResult.failure(
                f"({x}, {y}) is not a pin", error_code="ILLEGAL_PLACEMENT"
            )

        if kind == CellKind.GEAR_PIN:
            if part.is_gear_capable:
                new_part = PartKind.EMPTY if current.is_gear else PartKind.GEAR
            elif part == PartKind.EMPTY or current.is_gear:
                new_part = PartKind.EMPTY
            else:
                return ActionResult.failure(
                    f"Only gears fit on the pin at ({x}, {y})",
                    error_code="ILLEGAL_PLACEMENT",
                )
        elif current == part or (current.is_gear and part.is_gear):
            new_part = PartKind.EMPTY
        else:
            new_part = part

        self._remember_for_undo(session, part.value)
        board.set(x, y, new_part)
        changes = [f"({x}, {y}): {current.value} -> {new_part.value}"]
        if new_part.is_gear_capable:
            fixed = normalize_component(board, x, y)
            if fixed:
                changes.append(f"{fixed} gear bits turned to match")
        return ActionResult.ok(status=session.status, changes=changes)

    def _handle_clear_cell(self, session: SimulationSession, action: Action) -> ActionResult:
        x, y = action.payload.x, action.payload.y
        if not session.topology.in_bounds(x, y):
            return ActionResult.failure(f"({x}, {y}) is off the board", error_code="OUT_OF_BOUNDS")
        current = session.board.get(x, y)
        self._remember_for_undo(session, "clear")
        session.board.set(x, y, PartKind.EMPTY)
        return ActionResult.ok(
            status=session.status,
            changes=[f"({x}, {y}): {current.value} removed"],
        )

    def _handle_hand_toggle(self, session: SimulationSession, action: Action) -> ActionResult:
        """Flip a ramp or bit, or rotate a gear network."""
        x, y = action.payload.x, action.payload.y
        board = session.board
        part = board.get(x, y)

        if part.is_gear_capable:
            self._remember_for_undo(session, "hand")
            size = toggle_component(board, x, y)
            return ActionResult.ok(
                status=session.status,
                changes=[f"gear network at ({x}, {y}) rotated ({size} parts)"],
            )

        if part in (PartKind.RAMP_LEFT, PartKind.RAMP_RIGHT, PartKind.BIT_LEFT, PartKind.BIT_RIGHT):
            self._remember_for_undo(session, "hand")
            board.set(x, y, part.flipped)
            return ActionResult.ok(
                status=session.status,
                changes=[f"({x}, {y}): {part.value} -> {part.flipped.value}"],
            )

        return ActionResult.failure(f"Nothing to toggle at ({x}, {y})", error_code="NOTHING_TO_TOGGLE")

    def _handle_erase(self, session: SimulationSession, action: Action) -> ActionResult:
        session.undo_board = session.board.copy()
        session.last_edit_tool = None
        session.board.clear()
        self._reset(session)
        return ActionResult.ok(status=session.status, changes=["board erased"])

    def _handle_undo(self, session: SimulationSession, action: Action) -> ActionResult:
        session.last_edit_tool = None
        if session.undo_board is None:
            return ActionResult.failure("Nothing to undo", error_code="NOTHING_STORED")
        session.board, session.undo_board = session.undo_board, session.board
        return ActionResult.ok(status=session.status, changes=["last edit undone"])

    def _handle_store(self, session: SimulationSession, action: Action) -> ActionResult:
        session.stored_board = session.board.copy()
        return ActionResult.ok(status=session.status, changes=["board stored"])

    def _handle_recall(self, session: SimulationSession, action: Action) -> ActionResult:
        if session.stored_board is None:
            return ActionResult.failure("No board stored", error_code="NOTHING_STORED")
        self._replace_board(session, session.stored_board.copy())
        self._reset(session)
        return ActionResult.ok(status=session.status, changes=["stored board recalled"])

    # =========================================================================
    # Marbles
    # =========================================================================

    def _handle_launch(self, session: SimulationSession, action: Action) -> ActionResult:
        return self._from_step(stepper.launch(session, action.payload.color))

    def _handle_step(self, session: SimulationSession, action: Action) -> ActionResult:
        return self._from_step(stepper.step(session))

    def _handle_step_back(self, session: SimulationSession, action: Action) -> ActionResult:
        return self._from_step(stepper.step_backward(session))

    def _handle_remove_ball(self, session: SimulationSession, action: Action) -> ActionResult:
        return self._from_step(stepper.remove_ball(session))

    def _handle_place_ball(self, session: SimulationSession, action: Action) -> ActionResult:
        payload = action.payload
        return self._from_step(stepper.place_ball(session, payload.x, payload.y, payload.color))

    def _handle_reset(self, session: SimulationSession, action: Action) -> ActionResult:
        self._reset(session)
        return ActionResult.ok(status=session.status, changes=["marbles reset"])

    def _handle_restart(self, session: SimulationSession, action: Action) -> ActionResult:
        """Reset the marbles and bring back the board of the last full-rail launch."""
        self._reset(session)
        if session.restart_board is None:
            return ActionResult.ok(status=session.status, changes=["marbles reset"])
        session.board, session.restart_board = session.restart_board, session.board
        return ActionResult.ok(status=session.status, changes=["marbles reset", "board restored"])

    def _handle_adjust_marbles(self, session: SimulationSession, action: Action) -> ActionResult:
        color, delta = action.payload.color, action.payload.delta
        if not session.reservoir.adjust(color, delta):
            return ActionResult.failure(
                f"Not enough {color.value} marbles to remove {-delta}",
                error_code="RESERVOIR_EMPTY",
            )
        return ActionResult.ok(
            status=session.status,
            changes=[f"{color.value} marbles: {session.reservoir.available(color)}"],
        )

    def _handle_set_marble_default(self, session: SimulationSession, action: Action) -> ActionResult:
        session.set_marble_default(action.payload.count)
        return ActionResult.ok(
            status=session.status,
            changes=[f"marble default set to {action.payload.count}"],
        )

    # =========================================================================
    # Loading
    # =========================================================================

    def _handle_load_demo(self, session: SimulationSession, action: Action) -> ActionResult:
        from ..games.demos import get_demo, demos_available

        name = action.payload.name
        if not demos_available(session.topology):
            return ActionResult.failure(
                "Demos only exist for the 11x11 board", error_code="DEMO_UNAVAILABLE"
            )
        demo = get_demo(name)
        if demo is None:
            return ActionResult.failure(f"Unknown demo: {name}", error_code="UNKNOWN_DEMO")

        board, blue, red = demo.load(session.topology)
        self._replace_board(session, board)
        self._reset(session)
        if demo.url_code is not None:
            session.reservoir = Reservoir(blue, red, blue, red)
        logger.info("Loaded demo %s", name)
        return ActionResult.ok(status=session.status, changes=[f"demo {name} loaded"])

    def _handle_load_text(self, session: SimulationSession, action: Action) -> ActionResult:
        from ..codecs.text import decode_text

        board = decode_text(action.payload.text, session.topology)
        if board is None:
            return ActionResult.failure("Empty board text", error_code="MALFORMED_BOARD")
        self._replace_board(session, board)
        self._reset(session)
        return ActionResult.ok(status=session.status, changes=["board loaded from text"])

    def _handle_load_url(self, session: SimulationSession, action: Action) -> ActionResult:
        from ..codecs.url import decode_url

        decoded = decode_url(action.payload.text, session.topology)
        self._replace_board(session, decoded.board)
        self._reset(session)
        session.reservoir = decoded.reservoir()
        return ActionResult.ok(status=session.status, changes=["board loaded from code"])

    # =========================================================================
    # Helpers
    # =========================================================================

    def _replace_board(self, session: SimulationSession, board: Board) -> None:
        session.undo_board = session.board.copy()
        session.last_edit_tool = None
        session.board = board

    def _reset(self, session: SimulationSession) -> None:
        """Marbles back on the rails, tray emptied, nothing rolling."""
        session.reservoir.refill()
        stepper.remove_ball(session)
        session.exit_queue = []

    def _from_step(self, result: stepper.StepResult) -> ActionResult:
        if not result.success:
            return ActionResult.failure(result.error, error_code=result.error_code)
        return ActionResult.ok(status=result.status, changes=result.events, stopped=result.stopped)


def apply_action(session: SimulationSession, action: Action) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer()
    return reducer.apply(session, action)
