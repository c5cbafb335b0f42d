class FixedRandom:
    """Random source that always picks the same index and spawn roll."""

    def __init__(self, index=0, roll=0.5):
        self.index = index
        self.roll = roll

    def choice(self, seq):
        return seq[self.index]

    def random(self):
        return self.roll


def make_board(*cells):
    """Builds a 4x4 board from (row, col, value) triples."""
    board = [[0] * 4 for _ in range(4)]
    for row, col, value in cells:
        board[row][col] = value
    return board
