"""Module for messaging"""
from .base import MessageAdapter
from .local import LocalMessageAdapter
