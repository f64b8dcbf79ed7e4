import logging
import os

import pygame

from snowfall import DELTA_TIME, N_SNOWFLAKES, Snowfall

logger = logging.getLogger(__name__)

# =========================
# 設定
# =========================
FPS = 60                     # 約 16ms / フレーム
BACKGROUND = (0, 0, 30)
SPRITE_PATH = "snowflake.png"
SPRITE_SIZE = 32


# =========================
# 画面サイズ（Viewport provider）
# =========================
def display_viewport():
    """今のウィンドウサイズ。まだウィンドウが無い / 取れないなら None。"""
    try:
        surface = pygame.display.get_surface()
    except pygame.error as exc:
        logger.warning("cannot read display surface: %s", exc)
        return None
    if surface is None:
        return None
    return surface.get_size()


def desktop_resolution():
    sizes = pygame.display.get_desktop_sizes()
    if not sizes:
        raise pygame.error("no desktop display available")
    return sizes[0]


# =========================
# 雪の画像
# =========================
def make_sprite(size: int = SPRITE_SIZE) -> pygame.Surface:
    """画像が無いとき用の、ふわっとした白い丸。"""
    s = pygame.Surface((size, size), pygame.SRCALPHA)
    r = size // 2
    # 外側ほど薄く
    for i in range(r, 0, -1):
        alpha = int(255 * (1 - i / r) ** 0.5)
        pygame.draw.circle(s, (255, 255, 255, alpha), (r, r), i)
    return s


def load_sprite(path: str = SPRITE_PATH) -> pygame.Surface:
    if os.path.exists(path):
        image = pygame.image.load(path)
        if pygame.display.get_surface() is not None:
            image = image.convert_alpha()
        return image
    logger.warning("sprite %s not found, drawing snowflakes procedurally", path)
    return make_sprite()


class SnowRenderer:
    """粒ごとに size/depth の正方形へ縮めたスプライトを貼る。"""

    def __init__(self, sprite: pygame.Surface):
        self.sprite = sprite
        self._scaled = {}

    def sprite_for(self, side: int) -> pygame.Surface:
        scaled = self._scaled.get(side)
        if scaled is None:
            scaled = pygame.transform.scale(self.sprite, (side, side))
            self._scaled[side] = scaled
        return scaled

    def draw(self, surf: pygame.Surface, snowflakes):
        for flake in snowflakes:
            side = int(flake.render_size)
            if side <= 0:
                continue
            surf.blit(self.sprite_for(side),
                      (int(flake.position.x), int(flake.position.y)))


# =========================
# メイン
# =========================
def main():
    logging.basicConfig(level=logging.INFO)

    pygame.init()
    try:
        width, height = desktop_resolution()
        screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)
        pygame.display.set_caption("Snow")
        clock = pygame.time.Clock()

        renderer = SnowRenderer(load_sprite())
        snowfall = Snowfall(viewport=display_viewport)
        snowfall.seed(N_SNOWFLAKES, width, height)
        logger.info("snowing %d flakes at %dx%d", N_SNOWFLAKES, width, height)

        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False

            # 更新（固定 tick）
            snowfall.step_all(DELTA_TIME)

            # 描画
            screen.fill(BACKGROUND)
            renderer.draw(screen, snowfall.snowflakes)

            pygame.display.flip()
            clock.tick(FPS)
    finally:
        pygame.quit()


if __name__ == "__main__":
    main()
