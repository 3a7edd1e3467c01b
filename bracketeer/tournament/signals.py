"""
Live update notifications for bracket changes.

The engine reports changes through SignalLiveUpdateSink, which turns them
into Django signals once the surrounding transaction commits. Receivers are
called with send_robust so a failing receiver is logged and never affects
the request that caused the change.

    match_updated(sender, tournament_id, match_id)
    bracket_updated(sender, tournament_id)
"""

import logging

import django.dispatch
from django.db import transaction
from django.dispatch import receiver

from bracketeer.bracket_core.interfaces import LiveUpdateSink

logger = logging.getLogger(__name__)

match_updated = django.dispatch.Signal()
bracket_updated = django.dispatch.Signal()


def _send(signal, **kwargs):
    for handler, response in signal.send_robust(sender=SignalLiveUpdateSink, **kwargs):
        if isinstance(response, Exception):
            logger.error(
                "Live update receiver %r failed: %s",
                handler,
                response,
                exc_info=(type(response), response, response.__traceback__),
            )


class SignalLiveUpdateSink(LiveUpdateSink):
    def emit_match_update(self, tournament_id, match_id):
        transaction.on_commit(
            lambda: _send(match_updated, tournament_id=tournament_id, match_id=match_id)
        )

    def emit_bracket_update(self, tournament_id):
        transaction.on_commit(lambda: _send(bracket_updated, tournament_id=tournament_id))


@receiver(match_updated, dispatch_uid='bracketeer.log_match_updated')
def log_match_updated(sender, tournament_id, match_id, **kwargs):
    logger.debug("Match %s of tournament %s updated", match_id, tournament_id)


@receiver(bracket_updated, dispatch_uid='bracketeer.log_bracket_updated')
def log_bracket_updated(sender, tournament_id, **kwargs):
    logger.debug("Bracket of tournament %s updated", tournament_id)
