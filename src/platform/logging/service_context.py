"""
Service context for log lines: which service, which deployment, which process.
"""

from functools import lru_cache
import os
import socket


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'seat-reservation')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')
    # Containers get a unique hostname; locally the pid is more useful
    instance = os.getenv('HOSTNAME') or f'{socket.gethostname()}-{os.getpid()}'
    return f'{service_name}@{deploy_env}:{instance[:16]}'
