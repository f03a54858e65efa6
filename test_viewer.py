import pytest

pytest.importorskip("pygame")

from board import Car  # noqa: E402
from game import Game  # noqa: E402
from viewer import (  # noqa: E402
    GOAL_COLOURS,
    PALETTE,
    AnimatedCar,
    SolutionViewer,
    car_colours,
    compute_board_geometry,
)


def test_board_geometry_leaves_room_for_the_exit():
    assert compute_board_geometry(6) == (85, 45, 45)

    cell, offset_x, _ = compute_board_geometry(4)
    assert offset_x + cell * 4 + cell // 3 <= 600


def test_goal_car_has_its_own_colour():
    assert car_colours("X", "X") == GOAL_COLOURS
    assert car_colours("A", "X") in PALETTE
    assert car_colours("X", "A") in PALETTE


def test_animated_car_converges_on_its_target():
    animated = AnimatedCar(Car("A", 0, 0, "H", 2))
    animated.update_target(Car("A", 2, 0, "H", 2))

    for _ in range(200):
        if not animated.animate():
            break

    assert (animated.display_x, animated.display_y) == (2.0, 0.0)
    assert not animated.animate()


def test_viewer_steps_through_a_solution_without_a_window():
    game = Game()
    game.load_puzzle("drive-off")
    game.solve()
    viewer = SolutionViewer(game)

    viewer.next_step()
    assert viewer.status_message.startswith("Step 1")

    for _ in game.solution[1:]:
        if viewer.animated_cars["C"].departed:
            break
        viewer.next_step()
    assert viewer.animated_cars["C"].departed

    while game.step_solution():
        pass
    viewer.next_step()
    assert viewer.status_message == "Solved!"

    viewer.previous_step()
    assert game.solution_index == len(game.solution) - 1

    viewer.reset()
    assert not viewer.animated_cars["C"].departed
    assert viewer.animated_cars["X"].display_x == 0.0
