from .surface import Surface, GradientFill, to_rgba
from .renderer import draw_item, draw_items, render_to_file, render_hit_batches
from .hitmap import HIT_PALETTE, get_item_at_point, iter_hit_batches
