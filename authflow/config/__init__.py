from .settings import LOGGING, AuthFlowSettings, configure_logging

__all__ = ['AuthFlowSettings', 'LOGGING', 'configure_logging']
