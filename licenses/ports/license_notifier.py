"""
License notifier port (interface).

Delivers a freshly issued license key to the buyer.
"""
from abc import ABC, abstractmethod


class LicenseNotifier(ABC):
    """
    Abstract notifier for newly created licenses.

    Implementations must not raise: a failed delivery never undoes
    the license it announces.
    """

    @abstractmethod
    def send_license_key(self, license_key: str, plugin_name: str, email: str) -> None:
        """
        Send a license key to its buyer.

        Args:
            license_key: Generated license key
            plugin_name: Display name of the purchased plugin
            email: Buyer email address
        """
        pass
