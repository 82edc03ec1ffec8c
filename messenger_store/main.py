"""Console for inspecting and resetting local messenger state."""
import json
import sys
from typing import Optional

from .app import StateController
from .config import current_profile, resolve_data_dir
from .errors import CredentialRestoreError, StateStoreError
from .logging_config import configure_logging
from .models import to_payload


class StateConsole:
    """Interactive console over one profile's local state."""

    def __init__(self, controller: StateController):
        self.controller = controller

    def show_session(self) -> None:
        user = self.controller.get_user()
        if user is None:
            print("Not signed in.")
            return
        print(f"Signed in as {user.display_name} <{user.email}>")
        print(json.dumps(to_payload(user, exclude_none=True), indent=2))

    def show_preferences(self) -> None:
        prefs = self.controller.get_auth_preferences()
        print(f"Remember me:            {prefs.remember_me}")
        print(f"Remember password:      {prefs.remember_password}")
        print(f"Sign in automatically:  {prefs.sign_in_automatically}")
        print(f"Remembered email:       {prefs.remembered_email or '-'}")
        print(f"Password stored:        {'yes' if prefs.encrypted_password else 'no'}")

    def check_credentials(self) -> None:
        try:
            email, password = self.controller.get_remembered_credentials()
        except CredentialRestoreError as exc:
            print(f"{exc} (email: {exc.email or '-'})")
            return
        if password is None:
            print(f"No saved password (email: {email or '-'}).")
        else:
            print(f"Saved password for {email or '-'} can be restored.")

    def show_settings(self) -> None:
        print(json.dumps(to_payload(self.controller.get_settings()), indent=2))

    def sign_out(self) -> None:
        try:
            self.controller.clear_auth()
        except StateStoreError as exc:
            print(f"Sign out failed: {exc}")
            return
        print("Signed out.")

    def forget_credentials(self) -> None:
        try:
            self.controller.clear_auth_preferences()
        except StateStoreError as exc:
            print(f"Could not clear saved credentials: {exc}")
            return
        print("Saved credentials cleared.")

    def reset_settings(self) -> None:
        try:
            self.controller.reset_settings()
        except StateStoreError as exc:
            print(f"Could not reset settings: {exc}")
            return
        print("Settings reset to defaults.")


def main(controller: Optional[StateController] = None) -> None:
    if controller is None:
        # logging first, so load failures while building the stores reach the log file
        configure_logging(resolve_data_dir(profile=current_profile()))
        controller = StateController.from_environment()
    console = StateConsole(controller)
    print("Messenger local state")
    print(f"Data directory: {controller.data_dir}")
    if controller.get_profile():
        print(f"Profile: {controller.get_profile()}")

    actions = {
        "s": console.show_session,
        "p": console.show_preferences,
        "c": console.check_credentials,
        "t": console.show_settings,
        "o": console.sign_out,
        "f": console.forget_credentials,
        "r": console.reset_settings,
    }
    while True:
        print(
            "\nMenu: [s]ession, [p]references, [c]redentials, se[t]tings, "
            "sign [o]ut, [f]orget credentials, [r]eset settings, [q]uit"
        )
        choice = input("> ").strip().lower()
        if choice == "q":
            sys.exit(0)
        action = actions.get(choice)
        if action:
            action()


if __name__ == "__main__":
    main()
