from .event_loop import EventLoop as EventLoop
