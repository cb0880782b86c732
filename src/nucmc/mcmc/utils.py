import os

import logging
logger = logging.getLogger('nucmc')


def clean_config(warmup_config):
    """
    Cleans the config dict and sets defaults.
    All config keys use lowercase with underscores.

    num_lanes is left as None when not given; configure_warmup sizes it from
    the available devices.
    """
    warmup_config.setdefault('gpu_preallocation', False)
    warmup_config.setdefault('use_double', False)
    warmup_config.setdefault('rng_seed', 42)
    warmup_config.setdefault('num_lanes', None)
    warmup_config.setdefault('num_dimensions', 1)
    warmup_config.setdefault('initial_value', 0.0)
    warmup_config.setdefault('step_size', 1.0)
    warmup_config.setdefault('warmup_iter', 1000)
    warmup_config.setdefault('density', 'standard_normal')
    warmup_config.setdefault('chunk_size', 1000)
    warmup_config.setdefault('benchmark', 0)

    if type(warmup_config["gpu_preallocation"]) != bool:
        logger.warning("'gpu_preallocation' must be 'True' or 'False'")

    # Only effective if set before the first device allocation
    if 'XLA_PYTHON_CLIENT_PREALLOCATE' not in os.environ:
        if warmup_config["gpu_preallocation"]:
            logger.info("Pre-allocating GPU memory.")
            os.environ['XLA_PYTHON_CLIENT_PREALLOCATE'] = 'true'
        else:
            logger.info("Disabling GPU memory pre-allocation.")
            os.environ['XLA_PYTHON_CLIENT_PREALLOCATE'] = 'false'

    return warmup_config
