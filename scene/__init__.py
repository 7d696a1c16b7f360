from .config import SceneOptions
from .registry import ItemRecord, SceneRegistry
from .scene import Scene
from .animation import Animation, AnimationLoop, parse_duration
from .logging_config import setup_logging
