"""Configuration"""
from .config import BaseConfig, OrgDeskConfig
