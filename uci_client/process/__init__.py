"""
Process Module

Engine subprocess hosting: spawning, the writer/reader threads and the
bounded command and line queues between them and the session.
"""

from uci_client.process.host import ProcessHost

__all__ = ['ProcessHost']
