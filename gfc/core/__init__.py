# Core module - configuration, logging, errors and runtime files
