# =========================
# 2次元ベクトル
# =========================
class Vector2:
    """2成分の float ベクトル。

    + と * は新しいベクトルを返す。+= だけは自分自身を書き換える
    （力の蓄積に使う）。
    """

    __slots__ = ("x", "y")

    def __init__(self, x: float = 0.0, y: float = 0.0):
        self.x = float(x)
        self.y = float(y)

    def add(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x + other.x, self.y + other.y)

    def scale(self, scalar: float) -> "Vector2":
        return Vector2(self.x * scalar, self.y * scalar)

    def accumulate(self, other: "Vector2") -> "Vector2":
        self.x += other.x
        self.y += other.y
        return self

    __add__ = add
    __mul__ = scale
    __rmul__ = scale
    __iadd__ = accumulate

    def __eq__(self, other):
        if not isinstance(other, Vector2):
            return NotImplemented
        return self.x == other.x and self.y == other.y

    def __iter__(self):
        yield self.x
        yield self.y

    def __repr__(self):
        return f"Vector2({self.x!r}, {self.y!r})"
