"""
Report page template

Static HTML/CSS/JS shell shared by service and endpoint reports. The page
reads all of its data from the embedded ``metricboard-data`` JSON block;
only the heading, stats table and that block are expanded server-side.
"""

from string import Template

REPORT_TEMPLATE = Template("""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>$title</title>
    <script src="$chart_js_url"></script>
    <style>
        body { font-family: Arial, sans-serif; margin: 0; padding: 20px; color: #333; }
        h1 { color: #2929a9; text-align: center; }
        h2 { margin: 60px 0 20px 0; color: #2929a9; }
        h3 { color: #2929a9; }
        .chart-container { display: flex; justify-content: space-evenly; margin-bottom: 20px; }
        .chart-container > div { width: 45%; }
        table { width: 100%; border-collapse: collapse; margin-bottom: 20px; background-color: #fff; }
        table, th, td { border: 1px solid #ddd; }
        th, td { padding: 12px; text-align: left; }
        th { background-color: #f2f2f2; }
        .pagination { display: flex; justify-content: center; margin: 20px 0; }
        .pagination button { margin: 0 5px; padding: 10px 20px; border: 1px solid #2929a9; background-color: #2929a9; color: #fff; cursor: pointer; border-radius: 4px; }
        .pagination button:disabled { background-color: #ccc; border-color: #ccc; cursor: not-allowed; }
        .pagination span { padding: 10px 20px; }
        input[type="text"], input[type="date"] { margin: 10px 0; padding: 10px; width: calc(100% - 20px); box-sizing: border-box; border: 1px solid #ccc; border-radius: 4px; }
        input[type="text"]:focus, input[type="date"]:focus { outline: none; border-color: #007bff; }
        .filter-container { display: flex; justify-content: space-between; flex-wrap: wrap; gap: 10px; }
        .filter-container div { flex: 1; min-width: 250px; }
        .log-entry { background-color: #f9f9f9; border: 1px solid #ddd; padding: 10px; margin-bottom: 10px; border-radius: 5px; box-shadow: 0 2px 4px rgba(0, 0, 0, 0.1); font-size: 14px; line-height: 1.5; }
        .log-entry .timestamp { color: #0360aa; font-weight: 600; }
        .log-entry .log-method { font-weight: bold; }
        .log-entry .log-method.POST, .log-entry .log-method.PUT { color: #007bff; }
        .log-entry .log-method.GET { color: #28a745; }
        .log-entry .log-method.DELETE { color: #dc3545; }
        .log-entry .log-status { font-weight: bold; color: #28a745; }
        .log-entry .log-error { font-weight: bold; color: #dc3545; }
        .log-entry .payload { background-color: #f0f0f0; padding: 10px; margin-top: 5px; font-family: monospace; white-space: pre-wrap; border-left: 4px solid #0360aa; }
        .endpoints li { margin: 4px 0; font-family: monospace; }
    </style>
</head>
<body>
    <h1>$heading</h1>

    <div class="chart-container">
        <div>
            <h3>API Call Methods Distribution</h3>
            <canvas id="methodChart"></canvas>
        </div>
        <div>
            <h3>API Status Code Distribution</h3>
            <canvas id="statusChart"></canvas>
        </div>
    </div>

    <h2>Response Time Metrics</h2>
    <table id="responseStats">
        <tr><th>Slowest Response</th><td>$slowest</td></tr>
        <tr><th>Fastest Response</th><td>$fastest</td></tr>
        <tr><th>Median Response Time</th><td>$median</td></tr>
        <tr><th>95th Percentile</th><td>$p95</td></tr>
        <tr><th>99th Percentile</th><td>$p99</td></tr>
        <tr><th>Average Payload Size</th><td>$avg_payload</td></tr>
    </table>
$endpoints_section
    <h2>Total Requests Over Time</h2>
    <input type="date" id="datePicker" value="$default_date" />
    <canvas id="requestsOverTimeChart"></canvas>

    <h2>Logged API Calls</h2>
    <div class="filter-container">
        <div><input type="text" id="logFilterStatus" placeholder="Filter by Status Code" /></div>
        <div><input type="text" id="logFilterMethod" placeholder="Filter by Method" /></div>
    </div>
    <div id="logsContainer"></div>
    <div class="pagination">
        <button id="prevPage">Previous</button>
        <span id="pageInfo"></span>
        <button id="nextPage">Next</button>
    </div>

    <script type="application/json" id="metricboard-data">$data_json</script>
    <script>
        document.addEventListener("DOMContentLoaded", function () {
            var data = JSON.parse(document.getElementById("metricboard-data").textContent);
            var entries = data.entries;
            var pageSize = data.pageSize;
            var palette = ["#FF6384", "#36A2EB", "#FFCE56", "#4BC0C0", "#9966FF", "#FF9F40", "#C9CBCF"];
            var hasChart = typeof window.Chart !== "undefined";

            function pieChart(id, counts) {
                if (!hasChart) { return; }
                new Chart(document.getElementById(id).getContext("2d"), {
                    type: "pie",
                    data: {
                        labels: Object.keys(counts),
                        datasets: [{ data: Object.values(counts), backgroundColor: palette }]
                    }
                });
            }

            pieChart("methodChart", data.summary.methodCounts);
            pieChart("statusChart", data.summary.statusCounts);

            function hourlyCounts(day) {
                var counts = [];
                for (var hour = 0; hour < 24; hour++) { counts.push(0); }
                entries.forEach(function (entry) {
                    var stamp = new Date(entry.timestamp);
                    if (isNaN(stamp.getTime())) { return; }
                    if (stamp.toISOString().slice(0, 10) === day) {
                        counts[stamp.getUTCHours()] += 1;
                    }
                });
                return counts;
            }

            var trafficChart = null;
            function drawTraffic(day) {
                if (!hasChart) { return; }
                var labels = [];
                for (var hour = 0; hour < 24; hour++) { labels.push(hour + ":00"); }
                if (trafficChart) { trafficChart.destroy(); }
                trafficChart = new Chart(document.getElementById("requestsOverTimeChart").getContext("2d"), {
                    type: "line",
                    data: {
                        labels: labels,
                        datasets: [{ label: "API Requests (UTC hour)", data: hourlyCounts(day), borderColor: "#FF6384", fill: false }]
                    },
                    options: {
                        scales: {
                            y: {
                                beginAtZero: true,
                                ticks: {
                                    callback: function (value) {
                                        return Number.isInteger(value) ? value : null;
                                    }
                                }
                            }
                        }
                    }
                });
            }

            document.getElementById("datePicker").addEventListener("change", function () {
                drawTraffic(this.value);
            });
            drawTraffic(data.defaultDate);

            var currentPage = 1;
            var statusInput = document.getElementById("logFilterStatus");
            var methodInput = document.getElementById("logFilterMethod");

            function filteredEntries() {
                var status = statusInput.value.toLowerCase();
                var method = methodInput.value.toLowerCase();
                return entries.filter(function (entry) {
                    return String(entry.statusCode).toLowerCase().indexOf(status) !== -1 &&
                        String(entry.method).toLowerCase().indexOf(method) !== -1;
                }).reverse();
            }

            function span(className, text) {
                var node = document.createElement("span");
                node.className = className;
                node.textContent = text;
                return node;
            }

            function renderEntry(entry) {
                var row = document.createElement("div");
                row.className = "log-entry";
                row.appendChild(span("timestamp", new Date(entry.timestamp).toLocaleString()));
                row.appendChild(document.createTextNode(" - "));
                row.appendChild(span("log-method " + entry.method, entry.method));
                row.appendChild(document.createTextNode(" " + entry.url + " - Status: "));
                row.appendChild(span(entry.statusCode >= 400 ? "log-error" : "log-status", String(entry.statusCode)));
                row.appendChild(document.createTextNode(" - Response Time: " + entry.responseTime + " ms"));
                if (entry.method === "POST" || entry.method === "PUT") {
                    var payload = document.createElement("div");
                    payload.className = "payload";
                    payload.textContent = "Payload: " + JSON.stringify(entry.payload, null, 2);
                    row.appendChild(payload);
                }
                return row;
            }

            function displayLogs(page) {
                var rows = filteredEntries();
                var totalPages = Math.max(1, Math.ceil(rows.length / pageSize));
                currentPage = Math.min(Math.max(1, page), totalPages);
                var start = (currentPage - 1) * pageSize;
                var end = start + pageSize;

                var container = document.getElementById("logsContainer");
                container.innerHTML = "";
                rows.slice(start, end).forEach(function (entry) {
                    container.appendChild(renderEntry(entry));
                });

                document.getElementById("pageInfo").textContent = currentPage + " / " + totalPages;
                document.getElementById("prevPage").disabled = currentPage <= 1;
                document.getElementById("nextPage").disabled = end >= rows.length;
            }

            statusInput.addEventListener("input", function () { displayLogs(1); });
            methodInput.addEventListener("input", function () { displayLogs(1); });
            document.getElementById("prevPage").addEventListener("click", function () {
                displayLogs(currentPage - 1);
            });
            document.getElementById("nextPage").addEventListener("click", function () {
                displayLogs(currentPage + 1);
            });

            displayLogs(1);
        });
    </script>
</body>
</html>
""")

ENDPOINTS_TEMPLATE = Template("""
    <h2>Endpoints</h2>
    <ul class="endpoints">
$items
    </ul>
""")
