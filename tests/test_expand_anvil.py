import random
import numpy as np
from pypciv.cloudtypes import (
    CLEAR,
    CONVECTIVE_CORE,
    ICE_UNCLASSIFIED,
    ANVIL,
    INSITU,
    THRESH_HOMOGENEOUS_FREEZING,
    IWC_CONTINUITY_FACTOR,
)
from pypciv.curtain_grid import CurtainGrid
from pypciv.expand_anvil import expand_anvil_step
from pypciv.classify_insitu import classify_insitu


def make_random_curtain(seed, nx=12, ny=9):
    """Random curtain with a few cores, plenty of ice and a temperature field crossing -38 degC."""
    rng = np.random.default_rng(seed)
    cloudtype = rng.choice(
        [CLEAR, CONVECTIVE_CORE, ICE_UNCLASSIFIED], size=(ny, nx), p=[0.2, 0.1, 0.7]
    )
    temperature = rng.uniform(-70.0, -20.0, size=(ny, nx))
    iwc = rng.uniform(0.0, 1500.0, size=(ny, nx))
    return CurtainGrid.from_initial(cloudtype, temperature, iwc)


def expand_with_loop(grid, seed):
    """Visit sources and neighbors one by one in a shuffled order, reading the input snapshot."""
    shuffle = random.Random(seed).shuffle
    sources = [
        (x, y)
        for y in range(grid.ny)
        for x in range(grid.nx)
        if grid.cloudtype[y, x] in (CONVECTIVE_CORE, ANVIL)
    ]
    shuffle(sources)
    new_cloudtype = grid.cloudtype.copy()
    for sx, sy in sources:
        source = grid.get(sx, sy)
        targets = grid.neighbors(sx, sy)
        shuffle(targets)
        for tx, ty in targets:
            target = grid.get(tx, ty)
            if (
                target.cloudtype == ICE_UNCLASSIFIED
                and target.temperature < THRESH_HOMOGENEOUS_FREEZING
                and target.iwc <= source.iwc * IWC_CONTINUITY_FACTOR
            ):
                new_cloudtype[ty, tx] = ANVIL
    return new_cloudtype


# Example curtain: core, cold ice, warm ice in a single row
example_cloudtype = np.array([[CONVECTIVE_CORE, ICE_UNCLASSIFIED, ICE_UNCLASSIFIED]])
example_temperature = np.array([[-60.0, -40.0, -30.0]])
example_iwc = np.array([[1000.0, 200.0, 400.0]])


def test_example_curtain():
    grid = CurtainGrid.from_initial(example_cloudtype, example_temperature, example_iwc)

    # Iteration 1: the cold pixel next to the core becomes anvil
    grid, changed = expand_anvil_step(grid)
    assert changed
    assert grid.cloudtype.tolist() == [[CONVECTIVE_CORE, ANVIL, ICE_UNCLASSIFIED]]
    assert grid.changed_positions() == [(1, 0)]

    # Iteration 2: the warm pixel cannot be reached
    grid, changed = expand_anvil_step(grid)
    assert not changed
    assert grid.changed_positions() == []

    # Warm ice stays unclassified after finalization
    grid, progressed = classify_insitu(grid)
    assert not progressed
    assert grid.cloudtype.tolist() == [[CONVECTIVE_CORE, ANVIL, ICE_UNCLASSIFIED]]


def test_input_snapshot_is_not_modified():
    grid = CurtainGrid.from_initial(example_cloudtype, example_temperature, example_iwc)
    new_grid, changed = expand_anvil_step(grid)
    assert changed
    assert grid.cloudtype.tolist() == example_cloudtype.tolist()
    assert new_grid is not grid


def test_expansion_grows_one_pixel_per_iteration():
    # Anvil can only spread from pixels that were sources at the start of the iteration
    cloudtype = np.array([[CONVECTIVE_CORE, ICE_UNCLASSIFIED, ICE_UNCLASSIFIED, ICE_UNCLASSIFIED]])
    temperature = np.full((1, 4), -50.0)
    iwc = np.array([[100.0, 100.0, 100.0, 100.0]])
    grid = CurtainGrid.from_initial(cloudtype, temperature, iwc)
    for iteration in range(1, 4):
        grid, changed = expand_anvil_step(grid)
        assert changed
        assert np.count_nonzero(grid.cloudtype == ANVIL) == iteration
        assert grid.changed_positions() == [(iteration, 0)]
    grid, changed = expand_anvil_step(grid)
    assert not changed


def test_temperature_threshold_is_strict():
    cloudtype = np.array([[CONVECTIVE_CORE, ICE_UNCLASSIFIED]])
    iwc = np.array([[100.0, 10.0]])
    grid = CurtainGrid.from_initial(cloudtype, np.array([[-60.0, -38.0]]), iwc)
    _, changed = expand_anvil_step(grid)
    assert not changed
    grid = CurtainGrid.from_initial(cloudtype, np.array([[-60.0, -38.01]]), iwc)
    _, changed = expand_anvil_step(grid)
    assert changed


def test_iwc_continuity_bound_is_inclusive():
    cloudtype = np.array([[CONVECTIVE_CORE, ICE_UNCLASSIFIED, ICE_UNCLASSIFIED]])
    temperature = np.full((1, 3), -50.0)
    # 150 is exactly 1.5 x 100, but 151 is not
    grid = CurtainGrid.from_initial(cloudtype, temperature, np.array([[100.0, 150.0, 226.0]]))
    grid, changed = expand_anvil_step(grid)
    assert changed
    assert grid.get(1, 0).cloudtype == ANVIL
    # 226 > 1.5 x 150
    grid, changed = expand_anvil_step(grid)
    assert not changed
    assert grid.get(2, 0).cloudtype == ICE_UNCLASSIFIED

    grid = CurtainGrid.from_initial(cloudtype, temperature, np.array([[100.0, 151.0, 0.0]]))
    grid, changed = expand_anvil_step(grid)
    assert not changed


def test_any_qualifying_source_is_enough():
    # Target between a weak and a strong source qualifies through the strong one
    cloudtype = np.array([[CONVECTIVE_CORE, ICE_UNCLASSIFIED, CONVECTIVE_CORE]])
    temperature = np.full((1, 3), -50.0)
    iwc = np.array([[10.0, 500.0, 1000.0]])
    grid = CurtainGrid.from_initial(cloudtype, temperature, iwc)
    grid, changed = expand_anvil_step(grid)
    assert changed
    assert grid.get(1, 0).cloudtype == ANVIL


def test_no_diagonal_expansion():
    cloudtype = np.array([[CONVECTIVE_CORE, CLEAR],
                          [CLEAR, ICE_UNCLASSIFIED]])
    temperature = np.full((2, 2), -50.0)
    iwc = np.array([[1000.0, 0.0], [0.0, 10.0]])
    grid = CurtainGrid.from_initial(cloudtype, temperature, iwc)
    grid, changed = expand_anvil_step(grid)
    assert not changed


def test_clear_and_insitu_are_not_sources():
    cloudtype = np.array([[CLEAR, ICE_UNCLASSIFIED, INSITU, ICE_UNCLASSIFIED]])
    temperature = np.full((1, 4), -50.0)
    iwc = np.array([[1000.0, 10.0, 1000.0, 10.0]])
    grid = CurtainGrid(cloudtype, temperature, iwc)
    _, changed = expand_anvil_step(grid)
    assert not changed


def test_no_sources_no_change():
    cloudtype = np.full((3, 3), ICE_UNCLASSIFIED)
    grid = CurtainGrid.from_initial(cloudtype, np.full((3, 3), -60.0), np.ones((3, 3)))
    new_grid, changed = expand_anvil_step(grid)
    assert not changed
    assert np.array_equal(new_grid.cloudtype, grid.cloudtype)


def test_order_independence():
    for seed in range(5):
        grid = make_random_curtain(seed)
        while True:
            new_grid, changed = expand_anvil_step(grid)
            for order_seed in range(3):
                assert np.array_equal(expand_with_loop(grid, order_seed), new_grid.cloudtype)
            if not changed:
                break
            grid = new_grid


def test_convergence_is_idempotent():
    grid = make_random_curtain(11)
    changed = True
    while changed:
        grid, changed = expand_anvil_step(grid)
    again, changed_again = expand_anvil_step(grid)
    assert not changed_again
    assert np.array_equal(again.cloudtype, grid.cloudtype)


def test_monotonicity_and_constraints():
    for seed in range(5):
        grid = make_random_curtain(seed, nx=15, ny=10)
        core_flag = grid.cloudtype == CONVECTIVE_CORE
        changed = True
        niterations = 0
        while changed:
            previous = grid
            grid, changed = expand_anvil_step(grid)
            niterations += 1

            # Cores never change and classified pixels never change again
            assert np.array_equal(grid.cloudtype == CONVECTIVE_CORE, core_flag)
            was_classified = np.isin(previous.cloudtype, [ANVIL, INSITU])
            assert np.array_equal(grid.cloudtype[was_classified], previous.cloudtype[was_classified])

            # Only unclassified ice turns into anvil
            new_anvil = (grid.cloudtype == ANVIL) & (previous.cloudtype != ANVIL)
            assert np.all(previous.cloudtype[new_anvil] == ICE_UNCLASSIFIED)
            assert np.array_equal(new_anvil, grid.just_changed)

            # Every new anvil pixel satisfied both constraints against some source
            for x, y in grid.changed_positions():
                target = grid.get(x, y)
                assert target.temperature < THRESH_HOMOGENEOUS_FREEZING
                parents = [
                    previous.get(px, py)
                    for px, py in previous.neighbors(x, y)
                    if previous.cloudtype[py, px] in (CONVECTIVE_CORE, ANVIL)
                ]
                assert any(target.iwc <= p.iwc * IWC_CONTINUITY_FACTOR for p in parents)

        # Termination bound
        assert niterations <= grid.nx * grid.ny
