"""
Fast Fourier Transform plan module.

How this works
--------------

1. An `FFTPlan` is created for one grid and one run. It must be acquired
with a ``with`` block before any transform is computed; leaving the block
releases every plan and scratch buffer it holds. Transform calls outside
the block raise ``RuntimeError``.

2. With the ``"scipy"`` backend every transform goes through `scipy.fft`
with the ``workers`` argument, which lets SciPy parallelize across CPU
cores. With the ``"fftw"`` backend the plan builds one pyFFTW object per
transform kind and array shape the first time it is needed, and reuses
it for every later call. If pyFFTW is not installed the plan falls back
to SciPy and logs a warning.

3. `to_time` takes a coarse spectrum to the oversampled time grid by
zero-padding it in frequency, and `to_freq` does the reverse by cropping.
Both are scaled so that a field keeps its amplitude on either grid. For
real-field grids the spectrum is one-sided (``rfft``), for envelope grids
it is two-sided in FFT order.

4. All transforms run along the first axis, so multi-mode fields of shape
``(n_w, n_modes)`` are handled column by column.
"""

import os

import numpy as np
import scipy.fft

from ..errors import ConfigurationError
from ..log import get_logger

logger = get_logger(__name__)

FFT_BACKENDS = ("scipy", "fftw")


class FFTPlan:
    """Transform plan owned by a single propagation run."""

    def __init__(self, grid, backend="scipy", workers=-1):
        """
        Parameters
        ----------
        grid : RealGrid or EnvGrid
            Grid the transforms act on.
        backend : str, default: "scipy"
            ``"scipy"`` or ``"fftw"``.
        workers : int, default: -1
            Number of threads, -1 uses all CPU cores.

        """
        backend = backend.lower()
        if backend not in FFT_BACKENDS:
            raise ConfigurationError(
                f"Invalid FFT backend: '{backend}'. "
                f"Available backends are: {', '.join(FFT_BACKENDS)}",
                component="FFTPlan",
            )
        self.grid = grid
        self.backend = backend
        self.workers = workers
        self.real = grid.representation == "real"
        self.n_t = grid.t_nodes
        self.n_to = grid.to_nodes
        self.n_w = grid.w_nodes
        self.n_wo = grid.wo_nodes
        self.scale = self.n_to / self.n_t

        self._active = False
        self._fftw = None
        self._objects = {}
        self._buffers = {}

    def __enter__(self):
        if self.backend == "fftw":
            self._setup_fftw()
        self._active = True
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self._objects.clear()
        self._buffers.clear()
        self._fftw = None
        self._active = False
        return False

    @property
    def active(self):
        return self._active

    def _setup_fftw(self):
        try:
            import pyfftw.builders as fftw_builders

            self._fftw = fftw_builders
            logger.info("Using pyFFTW plans")
        except ImportError:
            logger.warning("pyFFTW not available. Falling back to SciPy")
            self._fftw = None

    def _threads(self):
        if self.workers is None or self.workers < 0:
            return os.cpu_count() or 1
        return self.workers

    def _transform(self, kind, data, n=None):
        if not self._active:
            raise RuntimeError(
                "FFT plan not acquired yet. Use it inside a 'with' block."
            )
        if self._fftw is None:
            return getattr(scipy.fft, kind)(data, n=n, axis=0, workers=self.workers)

        key = (kind, data.shape, data.dtype.str, n)
        fftw_obj = self._objects.get(key)
        if fftw_obj is None:
            fftw_obj = getattr(self._fftw, kind)(
                np.zeros_like(data),
                n=n,
                axis=0,
                threads=self._threads(),
                planner_effort="FFTW_ESTIMATE",
            )
            self._objects[key] = fftw_obj
        return fftw_obj(data).copy()

    def _buffer(self, name, shape, dtype):
        key = (name, shape)
        buf = self._buffers.get(key)
        if buf is None:
            buf = np.zeros(shape, dtype=dtype)
            self._buffers[key] = buf
        return buf

    def to_time(self, field_w, out=None):
        """
        Transform a coarse spectrum into the oversampled time grid.

        Parameters
        ----------
        field_w : (n_w,) or (n_w, n_modes) array_like
            Coarse spectrum.
        out : ndarray, optional
            Output in the fine time grid.

        """
        shape = (self.n_wo,) + field_w.shape[1:]
        buf = self._buffer("pad", shape, np.complex128)
        if self.real:
            buf[: self.n_w] = field_w
            buf[self.n_w :] = 0
            res = self._transform("irfft", buf, n=self.n_to)
        else:
            half = self.n_t // 2
            buf[:half] = field_w[:half]
            buf[half : self.n_to - half] = 0
            buf[self.n_to - half :] = field_w[half:]
            res = self._transform("ifft", buf)
        if out is None:
            return res * self.scale
        np.multiply(res, self.scale, out=out)
        return out

    def to_freq(self, field_t, out=None):
        """
        Transform a field in the oversampled time grid into a coarse spectrum.

        Parameters
        ----------
        field_t : (n_to,) or (n_to, n_modes) array_like
            Field in the fine time grid.
        out : ndarray, optional
            Output coarse spectrum.

        """
        if out is None:
            out = np.empty((self.n_w,) + field_t.shape[1:], dtype=np.complex128)
        if self.real:
            res = self._transform("rfft", field_t)
            np.divide(res[: self.n_w], self.scale, out=out)
        else:
            half = self.n_t // 2
            res = self._transform("fft", field_t)
            np.divide(res[:half], self.scale, out=out[:half])
            np.divide(res[self.n_to - half :], self.scale, out=out[half:])
        return out

    def time_signal(self, field_w):
        """Coarse time-domain field from a coarse spectrum."""
        if self.real:
            return self._transform("irfft", np.asarray(field_w), n=self.n_t)
        return self._transform("ifft", np.asarray(field_w))

    def spectrum(self, field_t):
        """Coarse spectrum from a coarse time-domain field."""
        if self.real:
            return self._transform("rfft", np.asarray(field_t))
        return self._transform("fft", np.asarray(field_t))
