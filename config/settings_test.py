from .settings import *

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

DEFAULT_GAME_PRICES = {
    'playzone_1hr': '200',
    'playzone_unlimited': '350',
    'skatepark_30min': '100',
    'skatepark_1hr': '150',
    'skatepark_extra_hour': '100',
}

LOGGING['loggers']['bookings']['level'] = 'CRITICAL'
LOGGING['loggers']['venue']['level'] = 'CRITICAL'
