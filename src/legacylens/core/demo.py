"""
Demo Manager - Ships a ready-made analysis of a legacy Java monolith.

The payload mirrors what the analysis service returns for the Java sources
below: a god-class controller, a payment gateway with hardcoded keys and a
hand-rolled connection pool everything funnels into. It lets users explore
the map without calling the service, and `provision()` writes the sources
to disk so the real analysis can be run against them.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class DemoManager:
    """
    Provides the demo payload and scaffolds its source files.
    """

    ORDER_CONTROLLER = """
public class OrderController {
  // God class implementation handling too many responsibilities
  private Logger logger = new Logger();
  private AuthService auth = new AuthService();

  public void processOrder(Order order) {
     if (!auth.check(order.userId)) return;

     // CRITICAL: Direct dependency instantiation
     LegacyPaymentGateway gw = new LegacyPaymentGateway();
     gw.charge(order.amount);

     // Static coupling
     InventoryManager.update(order.items);

     // CRITICAL: SQL Injection Vulnerability
     String sql = "INSERT INTO orders VALUES (" + order.id + ", " + order.amount + ")";
     DB_Connection_Pool.execute(sql);

     EmailService.send(order.userEmail);
  }
}
"""

    PAYMENT_GATEWAY = """
public class LegacyPaymentGateway {
  // CRITICAL: Hardcoded API Credentials
  private String apiKey = "sk_live_0000000000000000";

  public void charge(double amount) {
     try {
       // DEPRECATED: Uses old SSLv3
       SSLContext ctx = SSLContext.getInstance("SSLv3");
     } catch (Exception e) {
       // CRITICAL: Swallows exceptions silently
       System.out.println("Payment error");
     }
  }
}
"""

    CONNECTION_POOL = """
public class DB_Connection_Pool {
   private static List<Connection> pool = new ArrayList<>();

   // CRITICAL: Not thread safe, deadlock prone
   public static void execute(String sql) {
     Connection conn = pool.get(0);
     conn.run(sql);
   }
}
"""

    INVENTORY_MANAGER = """
public class InventoryManager {
    public static void update(List<Item> items) {
        // Basic CRUD
    }
}
"""

    SUMMARY = (
        "Legacy Java 7 Monolith. Analysis reveals a 'God Class' controller with high "
        "cyclomatic complexity and critical SQL injection vulnerabilities in the data "
        "access layer. High risk of cascading failures."
    )

    def __init__(self, root_dir: Optional[Path] = None):
        self.root_dir = root_dir or Path.cwd()

    @staticmethod
    def _node(node_id: str, kind: str, score: int, details: str) -> Dict[str, Any]:
        return {
            "id": node_id,
            "type": kind,
            "data": {"label": node_id, "fragilityScore": score, "details": details},
            "position": {"x": 0, "y": 0},
        }

    def payload(self) -> Dict[str, Any]:
        """
        The analysis-service response for the demo monolith.

        Returns:
            Dict[str, Any]: summary, nodes and edges in the service's shape.
        """
        nodes = [
            self._node(
                "OrderController.java", "fragile", 9,
                "God Class (4000+ lines). Handles Auth, Logging, and Business Logic "
                "directly. Zero tests.",
            ),
            self._node(
                "LegacyPaymentGateway.java", "fragile", 8,
                "Hardcoded API keys. Deprecated SSL implementation. Catches generic Exception.",
            ),
            self._node(
                "InventoryManager.java", "standard", 4,
                "Standard CRUD operations. Reasonably isolated, though lacks error handling.",
            ),
            self._node(
                "UserSession.java", "standard", 5,
                "Stateful session bean. Moderate memory leak risk under load.",
            ),
            self._node(
                "DB_Connection_Pool.java", "fragile", 10,
                "Custom implementation of connection pooling. Deadlock prone. "
                "Concatenates raw SQL strings.",
            ),
            self._node(
                "EmailService.java", "standard", 2,
                "Simple utility class. Low complexity.",
            ),
        ]
        edges = [
            {"id": "e1", "source": "OrderController.java", "target": "LegacyPaymentGateway.java", "animated": True},
            {"id": "e2", "source": "OrderController.java", "target": "InventoryManager.java", "animated": True},
            {"id": "e3", "source": "OrderController.java", "target": "UserSession.java", "animated": False},
            {"id": "e4", "source": "OrderController.java", "target": "DB_Connection_Pool.java", "animated": True},
            {"id": "e5", "source": "LegacyPaymentGateway.java", "target": "DB_Connection_Pool.java", "animated": True},
            {"id": "e6", "source": "InventoryManager.java", "target": "DB_Connection_Pool.java", "animated": True},
            {"id": "e7", "source": "OrderController.java", "target": "EmailService.java", "animated": False},
        ]
        return {"summary": self.SUMMARY, "suggestions": [], "nodes": nodes, "edges": edges}

    def provision(self) -> Path:
        """
        Create the demo project structure on disk.

        Returns:
            Path: The path to the created demo directory.
        """
        demo_dir = self.root_dir / "legacylens-demo"
        src_dir = demo_dir / "src"
        src_dir.mkdir(parents=True, exist_ok=True)

        sources = {
            "OrderController.java": self.ORDER_CONTROLLER,
            "LegacyPaymentGateway.java": self.PAYMENT_GATEWAY,
            "DB_Connection_Pool.java": self.CONNECTION_POOL,
            "InventoryManager.java": self.INVENTORY_MANAGER,
        }
        for name, content in sources.items():
            (src_dir / name).write_text(content.strip() + "\n")

        logger.debug(f"Provisioned demo sources in {src_dir}")
        return demo_dir
