"""DeviceLog QA - question answering over device logs stored in MongoDB."""

__version__ = "0.1.0"
