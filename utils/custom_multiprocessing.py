"""
Script containing functions for multiprocessing
"""

from concurrent import futures


class ProcessExecutor:
    """Process pool used to build several games side by side.

    Submitted callables and their keyword arguments must be picklable, so
    workers are module-level functions taking plain configuration objects.
    """
    def __init__(self, max_workers=None):
        self.max_workers = max_workers
        self.executor = futures.ProcessPoolExecutor(max_workers=max_workers)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
        return False

    def shutdown(self):
        self.executor.shutdown(wait=True)

    def wait_on_futures(self, futures_iter):
        """Block until every future is done; failures stay on their future."""
        futures.wait(list(futures_iter), return_when=futures.ALL_COMPLETED)

    def submit(self, fn, **kwargs):
        return self.executor.submit(fn, **kwargs)
