from django.apps import AppConfig
from django.conf import settings


class ReviewsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'reviews'

    def ready(self):
        from ReviewAssigner.logging import configure_logging

        configure_logging(
            level=getattr(settings, 'REVIEWS_LOG_LEVEL', 'INFO'),
            json_output=getattr(settings, 'REVIEWS_LOG_JSON', True),
        )
