from easyapply.wizard.driver import WizardDriver
from easyapply.wizard.fields import FormFiller
from easyapply.wizard.machine import WizardState, transition

__all__ = ["FormFiller", "WizardDriver", "WizardState", "transition"]
