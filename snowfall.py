import logging
import math
import random
from typing import Optional

from vector2 import Vector2

logger = logging.getLogger(__name__)

# =========================
# 設定
# =========================
N_SNOWFLAKES = 500
GRAVITY = 0.005          # 下向きの力（1 tick あたり）
DELTA_TIME = 1.0         # 固定ステップ（実時間ではなく tick）

# 風
WIND_CHANGE_TICKS = 180  # これを超えたら風が変わる
WIND_RANGE = 0.5         # 風の強さ -0.5 .. +0.5
GUST_CHANCE = 5          # 1/5 の確率で突風
GUST_FACTOR = 4

# 揺れ
OSCILLATION_FREQ = 0.02
OSCILLATION_AMP = 1.5

# 画面
HORIZONTAL_OFFSET = 50   # 横ループの余白
SEED_MARGIN = 400        # 初期配置は画面より左右 400 ずつ広い帯
DEFAULT_WIDTH = 1600
DEFAULT_HEIGHT = 1200

MIN_DEPTH = 0.1


def default_viewport():
    """画面サイズが分からないとき用。常に None（＝既定サイズを使う）。"""
    return None


def resolve_viewport(viewport):
    """Viewport provider を呼んで (w, h) を返す。取れなければ既定サイズ。"""
    try:
        size = viewport()
    except RuntimeError as exc:
        # pygame.error も RuntimeError
        logger.warning("viewport provider failed (%s), falling back to %dx%d",
                       exc, DEFAULT_WIDTH, DEFAULT_HEIGHT)
        return DEFAULT_WIDTH, DEFAULT_HEIGHT
    if size is not None:
        width, height = int(size[0]), int(size[1])
        # 1 未満は randrange(0) になるので使えない
        if width >= 1 and height >= 1:
            return width, height
    logger.debug("viewport unavailable, falling back to %dx%d",
                 DEFAULT_WIDTH, DEFAULT_HEIGHT)
    return DEFAULT_WIDTH, DEFAULT_HEIGHT


# =========================
# 雪の粒
# =========================
class Snowflake:
    """1つの雪の粒。

    size / oscillation_offset / depth は生成後に変わらない。
    depth が大きいほど奥（小さく、ゆっくり落ちる）。
    """

    def __init__(self, x: float, y: float, *, rng=random,
                 size: Optional[float] = None,
                 oscillation_offset: Optional[float] = None,
                 depth: Optional[float] = None):
        self.position = Vector2(x, y)
        self.velocity = Vector2(rng.randrange(2) - 1, rng.randrange(2) + 1)
        self.acceleration = Vector2()

        if size is None:
            size = rng.randrange(3) + 6
        if oscillation_offset is None:
            oscillation_offset = rng.randrange(360)
        if depth is None:
            depth = max(MIN_DEPTH, (rng.randrange(100) + 1) / 10.0)
        elif depth <= 0:
            raise ValueError(f"depth must be positive, got {depth!r}")

        self._size = float(size)
        self._oscillation_offset = float(oscillation_offset)
        self._depth = float(depth)

    @property
    def size(self) -> float:
        return self._size

    @property
    def oscillation_offset(self) -> float:
        return self._oscillation_offset

    @property
    def depth(self) -> float:
        return self._depth

    @property
    def scale(self) -> float:
        # 描画サイズも落下も 1/depth
        return 1.0 / self._depth

    @property
    def render_size(self) -> float:
        return self._size * self.scale

    def apply_force(self, force: Vector2):
        self.acceleration += force

    def update(self, dt: float, wind_force: float, width: float, height: float,
               rng=random):
        # 横方向は毎 tick 「風 + 揺れ」で上書きする。
        # apply_force の x 成分は積分されない（縦だけ積分）。
        oscillation = math.sin(
            (self.position.y + self._oscillation_offset) * OSCILLATION_FREQ
        ) * OSCILLATION_AMP
        self.velocity.x = wind_force + oscillation
        self.velocity.y += self.acceleration.y * dt / self._depth

        self.position += self.velocity * dt
        self.acceleration = Vector2()

        # 下に抜けたら上へ（向き・速さは振り直し、他はそのまま）
        if self.position.y > height:
            self.recycle(width, rng)

        # 横ループ
        if self.position.x < -HORIZONTAL_OFFSET:
            self.position.x = width + HORIZONTAL_OFFSET
        elif self.position.x > width + HORIZONTAL_OFFSET:
            self.position.x = -HORIZONTAL_OFFSET

    def recycle(self, width: float, rng=random):
        self.position.y = 0.0
        self.position.x = float(rng.randrange(int(width)))
        self.velocity = Vector2(rng.randrange(3) - 1, rng.randrange(3) + 1)

    def __repr__(self):
        return (f"Snowflake(position={self.position!r}, velocity={self.velocity!r}, "
                f"size={self._size}, depth={self._depth})")


# =========================
# 風
# =========================
class Wind:
    """全粒に共通の風。tick を数えて、しきい値を超えたら振り直す。"""

    def __init__(self, force: float = 0.0, ticks_since_change: int = 0):
        self.force = force
        self.ticks_since_change = ticks_since_change

    def update(self, rng=random) -> float:
        self.ticks_since_change += 1
        if self.ticks_since_change > WIND_CHANGE_TICKS:
            self.force = (rng.randrange(200) - 100) / 100.0 * WIND_RANGE
            self.ticks_since_change = 0
            gust = rng.randrange(GUST_CHANCE) == 0
            if gust:
                self.force *= GUST_FACTOR
            logger.debug("wind changed: force=%.3f gust=%s", self.force, gust)
        return self.force


# =========================
# シミュレーション全体
# =========================
class Snowfall:
    """雪の粒の集まりと風をまとめて 1 tick ずつ進める。

    rng は randrange(n) を持つもの（random モジュールや random.Random）。
    viewport は引数なしで (w, h) か None を返す関数。
    """

    def __init__(self, *, rng=random, viewport=default_viewport,
                 gravity: float = GRAVITY, wind: Optional[Wind] = None):
        self.rng = rng
        self.viewport = viewport
        self.gravity = gravity
        self.wind = wind if wind is not None else Wind()
        self.snowflakes = []

    def seed(self, count: int, width: int, height: int):
        """最初から「降っている途中」に見えるよう、画面より広い帯にばらまく。"""
        if count < 0:
            raise ValueError(f"snowflake count must not be negative, got {count!r}")
        if int(width) < 1 or int(height) < 1:
            raise ValueError(f"viewport must be positive, got {width!r}x{height!r}")

        extended_width = int(width) + SEED_MARGIN * 2
        self.snowflakes = [
            Snowflake(self.rng.randrange(extended_width) - SEED_MARGIN,
                      self.rng.randrange(int(height)),
                      rng=self.rng)
            for _ in range(count)
        ]
        logger.debug("seeded %d snowflakes for %dx%d", count, width, height)
        return self.snowflakes

    def step_all(self, dt: float = DELTA_TIME):
        wind_force = self.wind.update(self.rng)
        width, height = resolve_viewport(self.viewport)
        gravity = Vector2(0.0, self.gravity)

        for flake in self.snowflakes:
            flake.apply_force(gravity)
            flake.update(dt, wind_force, width, height, self.rng)

    def __len__(self):
        return len(self.snowflakes)

    def __iter__(self):
        return iter(self.snowflakes)
