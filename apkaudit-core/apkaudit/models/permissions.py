# apkaudit — Android Package Risk Auditor
# Copyright (C) 2026 apkaudit Project Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""Permission catalog.

The closed set of Android platform permissions apkaudit knows about. Each
member's value is the canonical manifest name. Ordering follows declaration
order in the catalog, never the text of the name, so rule tables and reports
sort the same way regardless of how names are spelled in configuration.
"""

from __future__ import annotations

from enum import Enum

from apkaudit.errors import UnknownPermissionError


class Permission(str, Enum):
    """A cataloged Android permission."""

    # ── android.permission.* ──
    ACCEPT_HANDOVER = "android.permission.ACCEPT_HANDOVER"
    ACCESS_BACKGROUND_LOCATION = "android.permission.ACCESS_BACKGROUND_LOCATION"
    ACCESS_CHECKIN_PROPERTIES = "android.permission.ACCESS_CHECKIN_PROPERTIES"
    ACCESS_COARSE_LOCATION = "android.permission.ACCESS_COARSE_LOCATION"
    ACCESS_FINE_LOCATION = "android.permission.ACCESS_FINE_LOCATION"
    ACCESS_LOCATION_EXTRA_COMMANDS = "android.permission.ACCESS_LOCATION_EXTRA_COMMANDS"
    ACCESS_MEDIA_LOCATION = "android.permission.ACCESS_MEDIA_LOCATION"
    ACCESS_NETWORK_STATE = "android.permission.ACCESS_NETWORK_STATE"
    ACCESS_NOTIFICATION_POLICY = "android.permission.ACCESS_NOTIFICATION_POLICY"
    ACCESS_WIFI_STATE = "android.permission.ACCESS_WIFI_STATE"
    ACCOUNT_MANAGER = "android.permission.ACCOUNT_MANAGER"
    ACTIVITY_RECOGNITION = "android.permission.ACTIVITY_RECOGNITION"
    ADD_VOICEMAIL = "android.permission.ADD_VOICEMAIL"
    ANSWER_PHONE_CALLS = "android.permission.ANSWER_PHONE_CALLS"
    BATTERY_STATS = "android.permission.BATTERY_STATS"
    BIND_ACCESSIBILITY_SERVICE = "android.permission.BIND_ACCESSIBILITY_SERVICE"
    BIND_APPWIDGET = "android.permission.BIND_APPWIDGET"
    BIND_CARRIER_MESSAGING_SERVICE = "android.permission.BIND_CARRIER_MESSAGING_SERVICE"
    BIND_DEVICE_ADMIN = "android.permission.BIND_DEVICE_ADMIN"
    BIND_INPUT_METHOD = "android.permission.BIND_INPUT_METHOD"
    BIND_JOB_SERVICE = "android.permission.BIND_JOB_SERVICE"
    BIND_NFC_SERVICE = "android.permission.BIND_NFC_SERVICE"
    BIND_NOTIFICATION_LISTENER_SERVICE = "android.permission.BIND_NOTIFICATION_LISTENER_SERVICE"
    BIND_PRINT_SERVICE = "android.permission.BIND_PRINT_SERVICE"
    BIND_VPN_SERVICE = "android.permission.BIND_VPN_SERVICE"
    BIND_WALLPAPER = "android.permission.BIND_WALLPAPER"
    BLUETOOTH = "android.permission.BLUETOOTH"
    BLUETOOTH_ADMIN = "android.permission.BLUETOOTH_ADMIN"
    BLUETOOTH_ADVERTISE = "android.permission.BLUETOOTH_ADVERTISE"
    BLUETOOTH_CONNECT = "android.permission.BLUETOOTH_CONNECT"
    BLUETOOTH_PRIVILEGED = "android.permission.BLUETOOTH_PRIVILEGED"
    BLUETOOTH_SCAN = "android.permission.BLUETOOTH_SCAN"
    BODY_SENSORS = "android.permission.BODY_SENSORS"
    BROADCAST_PACKAGE_REMOVED = "android.permission.BROADCAST_PACKAGE_REMOVED"
    BROADCAST_SMS = "android.permission.BROADCAST_SMS"
    BROADCAST_STICKY = "android.permission.BROADCAST_STICKY"
    BROADCAST_WAP_PUSH = "android.permission.BROADCAST_WAP_PUSH"
    CALL_PHONE = "android.permission.CALL_PHONE"
    CALL_PRIVILEGED = "android.permission.CALL_PRIVILEGED"
    CAMERA = "android.permission.CAMERA"
    CAPTURE_AUDIO_OUTPUT = "android.permission.CAPTURE_AUDIO_OUTPUT"
    CHANGE_COMPONENT_ENABLED_STATE = "android.permission.CHANGE_COMPONENT_ENABLED_STATE"
    CHANGE_CONFIGURATION = "android.permission.CHANGE_CONFIGURATION"
    CHANGE_NETWORK_STATE = "android.permission.CHANGE_NETWORK_STATE"
    CHANGE_WIFI_MULTICAST_STATE = "android.permission.CHANGE_WIFI_MULTICAST_STATE"
    CHANGE_WIFI_STATE = "android.permission.CHANGE_WIFI_STATE"
    CLEAR_APP_CACHE = "android.permission.CLEAR_APP_CACHE"
    CONTROL_LOCATION_UPDATES = "android.permission.CONTROL_LOCATION_UPDATES"
    DELETE_CACHE_FILES = "android.permission.DELETE_CACHE_FILES"
    DELETE_PACKAGES = "android.permission.DELETE_PACKAGES"
    DIAGNOSTIC = "android.permission.DIAGNOSTIC"
    DISABLE_KEYGUARD = "android.permission.DISABLE_KEYGUARD"
    DUMP = "android.permission.DUMP"
    EXPAND_STATUS_BAR = "android.permission.EXPAND_STATUS_BAR"
    FACTORY_TEST = "android.permission.FACTORY_TEST"
    FOREGROUND_SERVICE = "android.permission.FOREGROUND_SERVICE"
    GET_ACCOUNTS = "android.permission.GET_ACCOUNTS"
    GET_ACCOUNTS_PRIVILEGED = "android.permission.GET_ACCOUNTS_PRIVILEGED"
    GET_PACKAGE_SIZE = "android.permission.GET_PACKAGE_SIZE"
    GET_TASKS = "android.permission.GET_TASKS"
    GLOBAL_SEARCH = "android.permission.GLOBAL_SEARCH"
    INSTALL_LOCATION_PROVIDER = "android.permission.INSTALL_LOCATION_PROVIDER"
    INSTALL_PACKAGES = "android.permission.INSTALL_PACKAGES"
    INTERNET = "android.permission.INTERNET"
    KILL_BACKGROUND_PROCESSES = "android.permission.KILL_BACKGROUND_PROCESSES"
    LOCATION_HARDWARE = "android.permission.LOCATION_HARDWARE"
    MANAGE_DOCUMENTS = "android.permission.MANAGE_DOCUMENTS"
    MANAGE_EXTERNAL_STORAGE = "android.permission.MANAGE_EXTERNAL_STORAGE"
    MASTER_CLEAR = "android.permission.MASTER_CLEAR"
    MEDIA_CONTENT_CONTROL = "android.permission.MEDIA_CONTENT_CONTROL"
    MODIFY_AUDIO_SETTINGS = "android.permission.MODIFY_AUDIO_SETTINGS"
    MODIFY_PHONE_STATE = "android.permission.MODIFY_PHONE_STATE"
    MOUNT_FORMAT_FILESYSTEMS = "android.permission.MOUNT_FORMAT_FILESYSTEMS"
    MOUNT_UNMOUNT_FILESYSTEMS = "android.permission.MOUNT_UNMOUNT_FILESYSTEMS"
    NFC = "android.permission.NFC"
    NFC_TRANSACTION_EVENT = "android.permission.NFC_TRANSACTION_EVENT"
    PACKAGE_USAGE_STATS = "android.permission.PACKAGE_USAGE_STATS"
    PERSISTENT_ACTIVITY = "android.permission.PERSISTENT_ACTIVITY"
    POST_NOTIFICATIONS = "android.permission.POST_NOTIFICATIONS"
    PROCESS_OUTGOING_CALLS = "android.permission.PROCESS_OUTGOING_CALLS"
    QUERY_ALL_PACKAGES = "android.permission.QUERY_ALL_PACKAGES"
    READ_CALENDAR = "android.permission.READ_CALENDAR"
    READ_CALL_LOG = "android.permission.READ_CALL_LOG"
    READ_CONTACTS = "android.permission.READ_CONTACTS"
    READ_EXTERNAL_STORAGE = "android.permission.READ_EXTERNAL_STORAGE"
    READ_FRAME_BUFFER = "android.permission.READ_FRAME_BUFFER"
    READ_INPUT_STATE = "android.permission.READ_INPUT_STATE"
    READ_LOGS = "android.permission.READ_LOGS"
    READ_MEDIA_AUDIO = "android.permission.READ_MEDIA_AUDIO"
    READ_MEDIA_IMAGES = "android.permission.READ_MEDIA_IMAGES"
    READ_MEDIA_VIDEO = "android.permission.READ_MEDIA_VIDEO"
    READ_PHONE_NUMBERS = "android.permission.READ_PHONE_NUMBERS"
    READ_PHONE_STATE = "android.permission.READ_PHONE_STATE"
    READ_PROFILE = "android.permission.READ_PROFILE"
    READ_SMS = "android.permission.READ_SMS"
    READ_SOCIAL_STREAM = "android.permission.READ_SOCIAL_STREAM"
    READ_SYNC_SETTINGS = "android.permission.READ_SYNC_SETTINGS"
    READ_SYNC_STATS = "android.permission.READ_SYNC_STATS"
    READ_USER_DICTIONARY = "android.permission.READ_USER_DICTIONARY"
    REBOOT = "android.permission.REBOOT"
    RECEIVE_BOOT_COMPLETED = "android.permission.RECEIVE_BOOT_COMPLETED"
    RECEIVE_MMS = "android.permission.RECEIVE_MMS"
    RECEIVE_SMS = "android.permission.RECEIVE_SMS"
    RECEIVE_WAP_PUSH = "android.permission.RECEIVE_WAP_PUSH"
    RECORD_AUDIO = "android.permission.RECORD_AUDIO"
    REORDER_TASKS = "android.permission.REORDER_TASKS"
    REQUEST_IGNORE_BATTERY_OPTIMIZATIONS = "android.permission.REQUEST_IGNORE_BATTERY_OPTIMIZATIONS"
    REQUEST_INSTALL_PACKAGES = "android.permission.REQUEST_INSTALL_PACKAGES"
    SCHEDULE_EXACT_ALARM = "android.permission.SCHEDULE_EXACT_ALARM"
    SEND_RESPOND_VIA_MESSAGE = "android.permission.SEND_RESPOND_VIA_MESSAGE"
    SEND_SMS = "android.permission.SEND_SMS"
    SET_ALWAYS_FINISH = "android.permission.SET_ALWAYS_FINISH"
    SET_ANIMATION_SCALE = "android.permission.SET_ANIMATION_SCALE"
    SET_DEBUG_APP = "android.permission.SET_DEBUG_APP"
    SET_PROCESS_LIMIT = "android.permission.SET_PROCESS_LIMIT"
    SET_TIME = "android.permission.SET_TIME"
    SET_TIME_ZONE = "android.permission.SET_TIME_ZONE"
    SET_WALLPAPER = "android.permission.SET_WALLPAPER"
    SET_WALLPAPER_HINTS = "android.permission.SET_WALLPAPER_HINTS"
    SIGNAL_PERSISTENT_PROCESSES = "android.permission.SIGNAL_PERSISTENT_PROCESSES"
    STATUS_BAR = "android.permission.STATUS_BAR"
    SYSTEM_ALERT_WINDOW = "android.permission.SYSTEM_ALERT_WINDOW"
    TRANSMIT_IR = "android.permission.TRANSMIT_IR"
    UPDATE_DEVICE_STATS = "android.permission.UPDATE_DEVICE_STATS"
    USE_BIOMETRIC = "android.permission.USE_BIOMETRIC"
    USE_CREDENTIALS = "android.permission.USE_CREDENTIALS"
    USE_FINGERPRINT = "android.permission.USE_FINGERPRINT"
    USE_SIP = "android.permission.USE_SIP"
    VIBRATE = "android.permission.VIBRATE"
    WAKE_LOCK = "android.permission.WAKE_LOCK"
    WRITE_APN_SETTINGS = "android.permission.WRITE_APN_SETTINGS"
    WRITE_CALENDAR = "android.permission.WRITE_CALENDAR"
    WRITE_CALL_LOG = "android.permission.WRITE_CALL_LOG"
    WRITE_CONTACTS = "android.permission.WRITE_CONTACTS"
    WRITE_EXTERNAL_STORAGE = "android.permission.WRITE_EXTERNAL_STORAGE"
    WRITE_GSERVICES = "android.permission.WRITE_GSERVICES"
    WRITE_PROFILE = "android.permission.WRITE_PROFILE"
    WRITE_SECURE_SETTINGS = "android.permission.WRITE_SECURE_SETTINGS"
    WRITE_SETTINGS = "android.permission.WRITE_SETTINGS"
    WRITE_SMS = "android.permission.WRITE_SMS"
    WRITE_SOCIAL_STREAM = "android.permission.WRITE_SOCIAL_STREAM"
    WRITE_SYNC_SETTINGS = "android.permission.WRITE_SYNC_SETTINGS"
    WRITE_USER_DICTIONARY = "android.permission.WRITE_USER_DICTIONARY"

    # ── Vendor and legacy namespaces ──
    COM_ANDROID_ALARM_SET_ALARM = "com.android.alarm.permission.SET_ALARM"
    COM_ANDROID_BROWSER_READ_HISTORY_BOOKMARKS = (
        "com.android.browser.permission.READ_HISTORY_BOOKMARKS"
    )
    COM_ANDROID_BROWSER_WRITE_HISTORY_BOOKMARKS = (
        "com.android.browser.permission.WRITE_HISTORY_BOOKMARKS"
    )
    COM_ANDROID_LAUNCHER_INSTALL_SHORTCUT = "com.android.launcher.permission.INSTALL_SHORTCUT"
    COM_ANDROID_LAUNCHER_UNINSTALL_SHORTCUT = (
        "com.android.launcher.permission.UNINSTALL_SHORTCUT"
    )
    COM_ANDROID_VENDING_BILLING = "com.android.vending.BILLING"
    COM_ANDROID_VENDING_CHECK_LICENSE = "com.android.vending.CHECK_LICENSE"
    COM_GOOGLE_C2DM_RECEIVE = "com.google.android.c2dm.permission.RECEIVE"
    COM_GOOGLE_GSERVICES_READ = "com.google.android.providers.gsf.permission.READ_GSERVICES"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> Permission:
        """Look up a permission by its canonical manifest name.

        Raises:
            UnknownPermissionError: if the name is not cataloged.
        """
        try:
            return cls(name)
        except ValueError:
            raise UnknownPermissionError(name) from None

    @property
    def catalog_index(self) -> int:
        """Position of the permission in the catalog."""
        return _CATALOG_INDEX[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Permission):
            return NotImplemented
        return self.catalog_index < other.catalog_index

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Permission):
            return NotImplemented
        return self.catalog_index <= other.catalog_index

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Permission):
            return NotImplemented
        return self.catalog_index > other.catalog_index

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Permission):
            return NotImplemented
        return self.catalog_index >= other.catalog_index


_CATALOG_INDEX: dict[Permission, int] = {p: i for i, p in enumerate(Permission)}
