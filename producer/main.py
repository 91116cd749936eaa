import logging

from common.errors import ProducerError
from common.logger import config_logger
from producer.config.config_init import initialize_config
from producer.presentation.producer_node import ProducerNode


def main():
    producer = None
    try:
        config = initialize_config()
        config_logger(config["logging_level"])

        producer = ProducerNode(config)
        topology = producer.start()
        for binding in topology.bindings:
            logging.info(
                f"Queue '{binding.queue.name}' bound to exchange '{binding.exchange.name}' "
                f"with key '{binding.routing_key}'"
            )
    except KeyboardInterrupt:
        logging.info("Producer stopped by user")
    except ProducerError as e:
        logging.error(f"Producer error: {e}")
        raise SystemExit(1)
    except (KeyError, ValueError) as e:
        logging.error(f"Producer configuration error: {e}")
        raise SystemExit(1)
    finally:
        if producer is not None:
            producer.stop()
        logging.info("Producer stopped")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)-8s %(message)s')
    logging.info("Starting producer module")
    main()
