"""Interactive prompts for the mig-nodepools CLI.

Commands never call ``click.confirm`` directly while processing pools; they
receive a confirmation callable so ``--yes`` runs and tests stay
non-interactive.
"""

from typing import Callable

import click

Confirm = Callable[[str], bool]


def make_confirm(assume_yes: bool) -> Confirm:
  """Return a confirmation callable.

  With *assume_yes* every question is answered "yes" without prompting;
  otherwise the user is asked on the terminal (default: no).
  """
  if assume_yes:
    return lambda _question: True

  def _ask(question):
    return click.confirm(question, default=False)

  return _ask
