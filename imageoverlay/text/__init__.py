from .base import Text
from .generic import TextRenderer
from .decorators import TextDecorator, BorderDecorator
