from .symbols import BLANK, EPSILON


class SparseTape:
    """An unbounded tape that only stores non-blank cells.

    Absence of a position means the cell holds ``BLANK``; positions may be
    negative.
    """

    def __init__(self, symbols=()):
        self._cells = {}
        self.load(symbols)

    def load(self, symbols):
        """Clear the tape and write ``symbols`` from position 0, skipping blanks."""
        self._cells.clear()
        for position, symbol in enumerate(symbols):
            if symbol is not BLANK:
                self._cells[position] = symbol

    def read(self, position):
        return self._cells.get(position, BLANK)

    def write(self, position, symbol):
        if symbol is EPSILON:
            raise ValueError("epsilon is not a tape symbol")
        if symbol is BLANK:
            # Keep storage sparse
            self._cells.pop(position, None)
            return
        self._cells[position] = symbol

    def window(self, center, radius):
        """Return ``(position, symbol)`` pairs around ``center``, both ends inclusive."""
        return [(position, self.read(position)) for position in range(center - radius, center + radius + 1)]

    def used_span(self):
        if not self._cells:
            return None
        return min(self._cells), max(self._cells)

    def contents(self):
        """Non-blank symbols in position order."""
        return [self._cells[position] for position in sorted(self._cells)]

    def cells(self):
        return dict(self._cells)

    def __len__(self):
        return len(self._cells)

    def __eq__(self, other):
        if not isinstance(other, SparseTape):
            return NotImplemented
        return self._cells == other._cells

    def __repr__(self):
        return f"SparseTape({self.cells()!r})"
