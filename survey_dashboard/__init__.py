from . import config
from .logs import configure_logging
from .server import ServerFactory
from .datasources import FigureCache, DatasetRepository
from .ui import UIBuilder
from .callbacks import register_callbacks

# Assemble
settings = config.get_settings()
configure_logging(settings.log_level)

factory = ServerFactory(settings)
server = factory.create_server()
cache = factory.create_cache(server)
app = factory.create_app(server)

# Datasets are built once, before any chart is interactive
repository = DatasetRepository.build(settings)

app.layout = UIBuilder(repository, settings).build_layout
register_callbacks(
    app,
    repository,
    settings,
    FigureCache(cache, timeout_seconds=settings.cache_timeout_seconds),
)

__all__ = ["app", "server", "repository"]
