"""JAX configuration: 64-bit precision and device selection."""

import os
import subprocess
from typing import Optional, List, Tuple

from loguru import logger

_device_configured = False


def _query_gpus(field: str) -> List[Tuple[int, float]]:
    """Query one per-GPU quantity with nvidia-smi.
    
    Returns list of (gpu_id, value) tuples, empty if no GPU is visible.
    """
    try:
        result = subprocess.run(
            ['nvidia-smi', f'--query-gpu=index,{field}', '--format=csv,noheader,nounits'],
            capture_output=True, text=True, timeout=5
        )
    except (subprocess.TimeoutExpired, FileNotFoundError):
        return []
    if result.returncode != 0:
        return []
    
    values = []
    for line in result.stdout.strip().split('\n'):
        parts = [part.strip() for part in line.split(',')]
        if len(parts) < 2:
            continue
        try:
            values.append((int(parts[0]), float(parts[1])))
        except ValueError:
            continue
    return values


def select_device(device: Optional[str] = None) -> Optional[int]:
    """Select the device JAX will run on.
    
    Parameters
    ----------
    device : str, optional
        Device specification:
        - None or "auto": least utilized GPU (ties broken by free memory)
        - "cpu": Force CPU
        - "0", "1", "cuda:0", "gpu:1", ...: Specific GPU index
        
    Returns
    -------
    gpu_id : int or None
        Selected GPU ID, or None if CPU/default selected.
        
    Notes
    -----
    Must be called before the first JAX computation, since it works by
    setting CUDA_VISIBLE_DEVICES. Later calls are ignored.
    """
    global _device_configured
    
    if _device_configured:
        return None
    
    if device is None or device == "auto":
        utilization = _query_gpus('utilization.gpu')
        if not utilization:
            logger.debug("No GPUs detected, using default JAX device")
            _device_configured = True
            return None
        free = dict(_query_gpus('memory.free'))
        ranked = sorted(utilization, key=lambda item: (item[1], -free.get(item[0], 0.0)))
        gpu_id = ranked[0][0]
        logger.info(f"Auto-selected GPU {gpu_id} (utilization {ranked[0][1]:.0f}%)")
    elif device.lower() == "cpu":
        logger.info("Forcing CPU device")
        os.environ['CUDA_VISIBLE_DEVICES'] = ''
        _device_configured = True
        return None
    else:
        device_str = device.lower()
        for prefix in ('cuda:', 'gpu:'):
            if device_str.startswith(prefix):
                device_str = device_str[len(prefix):]
                break
        try:
            gpu_id = int(device_str)
        except ValueError:
            raise ValueError(f"Invalid device specification: {device}. "
                             f"Use 'auto', 'cpu', or GPU index (e.g., '0', 'cuda:1')")
        logger.info(f"Using specified GPU {gpu_id}")
    
    os.environ['CUDA_VISIBLE_DEVICES'] = str(gpu_id)
    _device_configured = True
    return gpu_id


# Imported after select_device is defined: CUDA_VISIBLE_DEVICES only takes
# effect if it is set before JAX initializes its backends.
import jax
import jax.numpy as jnp

jax.config.update("jax_enable_x64", True)


def get_device_info() -> str:
    """Get available JAX devices as string."""
    return f"JAX devices: {[f'{d.platform}:{d.id}' for d in jax.devices()]}"


def is_gpu_available() -> bool:
    """Check if GPU is available for JAX."""
    return any(d.platform == 'gpu' for d in jax.devices())


__all__ = ['jax', 'jnp', 'get_device_info', 'is_gpu_available', 'select_device']
