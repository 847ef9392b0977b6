import pytest


def open_grid(rows=5, cols=5, start=(0, 0), exits=((4, 4),), **extra):
    config = {
        "name": extra.pop("name", f"open_{rows}x{cols}"),
        "rows": rows,
        "cols": cols,
        "start": {"row": start[0], "col": start[1]},
        "exits": [{"row": r, "col": c} for r, c in exits],
    }
    for key in ("walls", "smoke", "dynamic_events"):
        if key in extra:
            config[key] = extra.pop(key)
    assert not extra, f"unexpected keys: {extra}"
    return config


def cells(*positions):
    return [{"row": r, "col": c} for r, c in positions]


@pytest.fixture
def open_5x5():
    return open_grid()
