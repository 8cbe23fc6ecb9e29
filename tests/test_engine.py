import threading

import numpy as np
import pytest

from block_drop_rl.game import Action, BlockDropGame, GameConfig, GameStatus, ManualTimer, TetrominoType

from conftest import fill_row


O = int(TetrominoType.O)


def test_new_game_is_not_started():
    game = BlockDropGame(GameConfig(random_seed=0))
    assert game.status is GameStatus.NOT_STARTED
    assert game.current_piece is None
    assert not game.move_left()
    assert not game.hard_drop()


def test_start_spawns_and_arms_gravity(game, timer):
    assert game.status is GameStatus.RUNNING
    assert game.current_piece is not None
    assert timer.armed
    assert timer.interval_ms == 800
    assert len(game.queue) == 4
    assert not game.start()


def test_spawn_position_centered_above_board(game):
    piece = game.spawn(TetrominoType.I)
    assert (piece.x, piece.y) == (3, -1)
    piece = game.spawn(TetrominoType.T)
    assert (piece.x, piece.y) == (3, -2)


def test_hard_drop_o_piece_scenario(game):
    piece = game.spawn(TetrominoType.O)
    assert (piece.x, piece.y) == (4, -2)
    expected_next = game.queue.peek(1)[0]

    assert game.hard_drop()

    assert (game.grid.grid[18:20, 4:6] == O).all()
    assert np.count_nonzero(game.grid.grid) == 4
    assert game.score == 0
    assert game.can_hold
    assert game.current_piece.kind == expected_next
    assert game.current_piece.y == -game.current_piece.matrix.shape[0]


def test_gravity_moves_then_locks(game, timer):
    game.spawn(TetrominoType.O)
    timer.fire()
    assert game.current_piece.y == -1
    while game.soft_drop():
        pass
    # Blocked soft drop leaves the piece in place
    assert game.current_piece.kind == TetrominoType.O
    assert game.current_piece.y == 18
    timer.fire()
    assert (game.grid.grid[18:20, 4:6] == O).all()
    assert game.current_piece.y < 0


def test_single_line_clear(game):
    fill_row(game.grid, 19, skip=(4, 5))
    game.spawn(TetrominoType.O)
    game.hard_drop()
    assert game.lines == 1
    assert game.score == 100
    assert (game.grid.grid[19, 4:6] == O).all()
    assert np.count_nonzero(game.grid.grid) == 2


def test_tetris_with_vertical_i(game):
    for row in range(16, 20):
        fill_row(game.grid, row, skip=(0,))
    game.spawn(TetrominoType.I)
    assert game.rotate()
    assert game.current_piece.matrix.shape == (4, 1)
    while game.move_left():
        pass
    assert game.current_piece.x == 0
    game.hard_drop()
    assert game.lines == 4
    assert game.score == 800
    assert not game.grid.grid.any()


def test_level_up_rearms_gravity(game, timer):
    game.scores.lines = 9
    starts = timer.starts
    fill_row(game.grid, 19, skip=(4, 5))
    game.spawn(TetrominoType.O)
    game.hard_drop()
    assert game.level == 1
    assert game.score == 200
    assert timer.interval_ms == 720
    assert timer.starts == starts + 1


def test_lock_above_top_is_game_over(game, timer):
    game.grid.grid[:, 4] = 1
    game.grid.grid[:, 5] = 1
    game.spawn(TetrominoType.O)
    game.hard_drop()
    assert game.status is GameStatus.GAME_OVER
    assert game.game_over
    assert game.current_piece is None
    assert not timer.armed
    assert not game.move_left()
    assert not game.rotate()
    assert not game.hold()
    game.tick()
    assert game.current_piece is None


def test_game_over_decided_before_merge_even_when_rows_clear(game):
    # The merged cells complete row 0, but the top cells were above the board
    fill_row(game.grid, 0, skip=(4, 5))
    game.grid.grid[1:, 4:6] = 1
    game.spawn(TetrominoType.O)
    game.hard_drop()
    assert game.lines == 1
    assert game.status is GameStatus.GAME_OVER


def test_pause_halts_gravity_and_commands(game, timer):
    assert game.toggle_pause()
    assert game.status is GameStatus.PAUSED
    assert not timer.armed
    assert not game.move_left()
    assert not game.hard_drop()
    assert game.toggle_pause()
    assert game.status is GameStatus.RUNNING
    assert timer.armed
    assert game.move_left()


def test_resume_rearms_at_current_level(game, timer):
    game.scores.lines = 20
    game.toggle_pause()
    game.toggle_pause()
    assert game.level == 2
    assert timer.interval_ms == 640


def test_spawn_ignored_before_start(timer):
    game = BlockDropGame(GameConfig(random_seed=7), timer=timer)
    assert game.spawn() is None
    assert game.spawn(TetrominoType.T) is None
    assert game.current_piece is None
    assert len(game.queue) == 0
    assert game.status is GameStatus.NOT_STARTED


def test_spawn_ignored_after_game_over(game):
    game.grid.grid[:, 4] = 1
    game.spawn(TetrominoType.O)
    game.hard_drop()
    assert game.status is GameStatus.GAME_OVER
    assert game.spawn(TetrominoType.I) is None
    assert game.current_piece is None
    assert game.snapshot().active is None


def test_commands_wait_for_lock_holder(game):
    game.spawn(TetrominoType.O)
    start_y = game.current_piece.y
    worker = threading.Thread(target=game.tick)
    game._lock.acquire()
    try:
        worker.start()
        worker.join(timeout=0.2)
        assert worker.is_alive()
        assert game.current_piece.y == start_y
    finally:
        game._lock.release()
    worker.join(timeout=2)
    assert not worker.is_alive()
    assert game.current_piece.y == start_y + 1


def test_toggle_pause_ignored_outside_play():
    game = BlockDropGame()
    assert not game.toggle_pause()
    assert game.status is GameStatus.NOT_STARTED


def test_reset_restores_creation_state(game, timer):
    game.hard_drop()
    game.hold()
    game.reset()
    assert game.status is GameStatus.NOT_STARTED
    assert not game.grid.grid.any()
    assert (game.score, game.lines, game.level) == (0, 0, 0)
    assert game.current_piece is None
    assert game.held is None
    assert game.can_hold
    assert len(game.queue) == 0
    assert not timer.armed


def test_reset_with_same_seed_replays_pieces(timer):
    game = BlockDropGame(GameConfig(random_seed=99), timer=timer)
    game.start()
    first = [game.current_piece.kind] + list(game.queue.peek(4))
    game.reset()
    game.start()
    assert [game.current_piece.kind] + list(game.queue.peek(4)) == first


def test_start_after_game_over_reinitializes(game):
    game.grid.grid[:, 4] = 1
    game.spawn(TetrominoType.O)
    game.hard_drop()
    assert game.status is GameStatus.GAME_OVER
    assert game.start()
    assert game.status is GameStatus.RUNNING
    assert not game.grid.grid.any()
    assert game.current_piece is not None


def test_moves_blocked_by_walls(game):
    game.spawn(TetrominoType.O)
    for _ in range(4):
        assert game.move_left()
    assert not game.move_left()
    assert game.current_piece.x == 0
    for _ in range(8):
        assert game.move_right()
    assert not game.move_right()
    assert game.current_piece.x == 8


def test_rotation_rejected_keeps_piece(game):
    piece = game.spawn(TetrominoType.I)
    while game.soft_drop():
        pass
    # Kicks only move sideways, so a flat I on the floor cannot stand up
    assert piece.y == 19
    assert not game.rotate()
    assert piece.matrix.shape == (1, 4)
    assert piece.x == 3


def test_step_dispatches_actions(game):
    piece = game.spawn(TetrominoType.T)
    assert game.step(Action.LEFT)
    assert piece.x == 2
    assert game.step(Action.RIGHT)
    assert piece.x == 3
    assert game.step(Action.SOFT_DROP)
    assert piece.y == -1
    assert not game.step(Action.NONE)
    with pytest.raises(ValueError):
        game.step(42)


def test_snapshot_is_read_only_view(game):
    game.spawn(TetrominoType.O)
    queue_len = len(game.queue)
    snap = game.snapshot()
    assert snap.ghost_y == 18
    assert snap.next_kinds == game.queue.peek(3)
    assert len(snap.next_kinds) == 3
    assert len(game.queue) == queue_len
    assert snap.status is GameStatus.RUNNING
    assert snap.gravity_ms == 800
    # Piece is still above the board, so nothing is overlaid yet
    assert not snap.grid.any()
    snap.active.x = 0
    assert game.current_piece.x == 4


def test_snapshot_held_cannot_alter_game(game):
    game.spawn(TetrominoType.T)
    assert game.hold()
    snap = game.snapshot()
    assert snap.held.kind is TetrominoType.T
    before = game.held.matrix.copy()
    with pytest.raises(ValueError):
        snap.held.matrix[0, 0] = 9
    assert np.array_equal(game.held.matrix, before)


def test_snapshot_overlays_active_piece(game):
    game.spawn(TetrominoType.O)
    game.tick()
    game.tick()
    snap = game.snapshot()
    assert (snap.grid[0:2, 4:6] == O).all()
    assert not game.grid.grid.any()


def test_level_never_decreases(game):
    levels = []
    for _ in range(12):
        fill_row(game.grid, 19, skip=(4, 5))
        game.spawn(TetrominoType.O)
        game.hard_drop()
        # Clear the O leftovers so the next O lands on the floor again
        game.grid.grid[19, :] = 0
        levels.append(game.level)
        assert game.level == game.lines // 10
    assert levels == sorted(levels)
    assert game.level == 1


def test_config_rejects_tiny_board():
    with pytest.raises(ValueError):
        GameConfig(width=2, height=20)
    with pytest.raises(ValueError):
        GameConfig(queue_size=2, preview_size=3)


def test_default_timer_is_manual():
    game = BlockDropGame()
    assert isinstance(game.clock.timer, ManualTimer)
