"""Plot grid layout — where each square sits relative to the plot asset."""

from gardenplots.models.garden import GRID_SIZE

SQUARE_SPACING = 32  # world units between square centres


def square_offset(
    square_index: int, grid_size: int = GRID_SIZE, spacing: float = SQUARE_SPACING
) -> tuple[float, float]:
    """Offset of a square's centre from the plot centre, row-major order.

    Raises:
        ValueError: If the index is outside the grid.
    """
    if not 0 <= square_index < grid_size * grid_size:
        raise ValueError(f"Square index {square_index} outside {grid_size}x{grid_size} grid")
    row, col = divmod(square_index, grid_size)
    centre = (grid_size - 1) / 2
    return (col - centre) * spacing, (row - centre) * spacing
