from breathe.io.notifier import Notifier
from breathe.io.text_loop import run_text
from breathe.log import configure_logging
from breathe.session.controller import BreathingController
from breathe.voice.engine import load_engine
from breathe.voice.narrator import Narrator

if __name__ == "__main__":
    configure_logging()
    controller = BreathingController(narrator=Narrator(load_engine()), notifier=Notifier())
    try:
        run_text(controller)
    except KeyboardInterrupt:
        pass
    finally:
        controller.shutdown()
